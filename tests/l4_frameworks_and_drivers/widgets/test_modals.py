"""Tests for the download modal and the microphone permission advisory."""

from __future__ import annotations

import pytest
from textual.app import App, ComposeResult
from textual.widgets import ProgressBar, Static

from voice_relay.l4_frameworks_and_drivers.widgets.download_modal import DownloadModal
from voice_relay.l4_frameworks_and_drivers.widgets.permission_advisory import (
    PermissionAdvisory,
    TuiPermissionAdvisor,
)


class ModalHost(App[None]):
    """Minimal app to host modals for testing."""

    def compose(self) -> ComposeResult:
        yield Static('host')


class TestDownloadModal:
    def test_initial_state(self):
        modal = DownloadModal(model_name='base', size_description='142 MiB')
        assert modal.model_name == 'base'
        assert modal.percent == 0

    @pytest.mark.asyncio
    async def test_progress_never_decreases(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            modal = DownloadModal(model_name='base')
            app.push_screen(modal)
            await pilot.pause()

            modal.update_progress(40)
            modal.update_progress(25)

            assert modal.percent == 40
            assert modal.query_one('#dl-bar', ProgressBar).progress == 40

    @pytest.mark.asyncio
    async def test_dismiss(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            modal = DownloadModal(model_name='base')
            app.push_screen(modal)
            await pilot.pause()
            modal.dismiss()
            await pilot.pause()
            assert not isinstance(app.screen, DownloadModal)


class TestPermissionAdvisory:
    @pytest.mark.asyncio
    async def test_advisor_without_app_is_noop(self):
        TuiPermissionAdvisor().show()

    @pytest.mark.asyncio
    async def test_show_pushes_and_any_key_dismisses(self):
        app = ModalHost()
        async with app.run_test() as pilot:
            advisor = TuiPermissionAdvisor()
            advisor.attach(app)
            advisor.show()
            await pilot.pause()
            assert isinstance(app.screen, PermissionAdvisory)

            await pilot.press('x')
            await pilot.pause()
            assert not isinstance(app.screen, PermissionAdvisory)
