"""Plain-text status lines for operator notification channels."""

from __future__ import annotations

from ssui.domain.errors import error_code
from ssui.domain.install_models import InstallState, UpdaterOutcome


def format_outcome_message(outcome: UpdaterOutcome) -> str:
    """Render ``outcome`` as one line suitable for a chat/status channel."""
    platform = outcome.platform.value.capitalize()
    if outcome.ok:
        if outcome.install.state is InstallState.ALREADY_INSTALLED:
            return f"✅ Game server update finished ({platform}, updater already installed)."
        return f"✅ Updater installed and game server update finished ({platform})."

    err = outcome.error
    code = error_code(err)
    if not outcome.install.ready:
        return f"❌ Updater install failed on {platform} [{code}]: {outcome.reason}"
    return f"❌ Game server update failed on {platform} [{code}]: {outcome.reason}"


__all__ = ["format_outcome_message"]
