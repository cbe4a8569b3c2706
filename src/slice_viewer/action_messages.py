"""User-facing copy builders for CLI errors and UI notifications."""

from __future__ import annotations


def _ensure_sentence(text: str) -> str:
    """Return text with terminal sentence punctuation."""
    cleaned = text.strip()
    if not cleaned:
        return ""
    if cleaned.endswith((".", "!", "?")):
        return cleaned
    return f"{cleaned}."


def build_next_step_hint(next_step: str) -> str:
    """Build a canonical next-step guidance line."""
    return f"Next step: {_ensure_sentence(next_step)}"


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable error message."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_actionable_warning(
    message: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Build a 2-3 line actionable warning message."""
    lines = [_ensure_sentence(message)]
    if why:
        lines.append(f"Why: {_ensure_sentence(why)}")
    lines.append(build_next_step_hint(next_step))
    return "\n".join(lines)


def build_permission_denied_error(uri: str, permission: str | None, reason: str = "") -> str:
    """Explain a provider rejecting the viewer for *uri*."""
    if not permission:
        return build_actionable_error(
            f"display {uri}",
            why=f"the provider denied access ({reason or 'no reason given'})",
            next_step="check the provider's access rules or try another authority",
        )
    return build_actionable_error(
        f"display {uri}",
        why=f"the provider requires {permission}",
        next_step=f'add "{permission}" to granted_permissions in config.json',
    )


def build_authorities_notification(count: int) -> str:
    """Build notification text after a manual authority refresh."""
    return f"Found {count} slice authorit{'ies' if count != 1 else 'y'}."


__all__ = [
    "build_actionable_error",
    "build_actionable_warning",
    "build_authorities_notification",
    "build_next_step_hint",
    "build_permission_denied_error",
]
