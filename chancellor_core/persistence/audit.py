"""
Save Game Inspector — list, inspect and verify save slots from the terminal.

Usage:
    python -m chancellor_core.persistence.audit
    python -m chancellor_core.persistence.audit --slot autosave
    python -m chancellor_core.persistence.audit --slot autosave --verify
    python -m chancellor_core.persistence.audit --database-url sqlite:///other.db
"""

from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich.table import Table

from chancellor_core.config import settings
from chancellor_core.persistence.service import SaveGameService, SaveIntegrityError

console = Console()

TREND_BARS = " ▁▂▃▄▅▆▇█"


def sparkline(values: list[float], low: float = 0.0, high: float = 100.0) -> str:
    """Render a 0–100 series as a one-line bar chart."""
    if not values:
        return ""
    span = (high - low) or 1.0
    steps = len(TREND_BARS) - 1
    return "".join(
        TREND_BARS[round(max(0.0, min(1.0, (v - low) / span)) * steps)] for v in values
    )


def list_slots(service: SaveGameService) -> None:
    slots = service.list_slots()
    if not slots:
        console.print("[yellow]No save slots found[/yellow]")
        return

    table = Table(title="Save Slots", show_lines=False)
    table.add_column("Slot", style="cyan")
    table.add_column("Turn", justify="right")
    table.add_column("Status", style="green")
    table.add_column("Regime", style="yellow")
    table.add_column("Hash (first 16)", style="dim")
    table.add_column("Saved at")
    for slot in slots:
        table.add_row(
            slot["slot_name"],
            str(slot["turn"]),
            slot["status"],
            slot["regime_id"],
            slot["payload_hash"][:16] + "...",
            (slot["saved_at"] or "")[:19],
        )
    console.print(table)


def inspect_slot(service: SaveGameService, slot_name: str) -> bool:
    """Print one slot's key indicators. Returns False if it cannot be loaded."""
    try:
        state = service.load(slot_name)
    except SaveIntegrityError as exc:
        console.print(f"[bold red]✗ {exc}[/bold red]")
        return False
    if state is None:
        console.print(f"[yellow]No save slot named {slot_name!r}[/yellow]")
        return False

    rel = state.executive
    console.print(f"\n[bold blue]═══ {slot_name} — {state.calendar_label} ═══[/bold blue]")

    table = Table(show_header=False)
    table.add_column("Indicator", style="cyan")
    table.add_column("Value")
    table.add_row("Status", state.status.value)
    table.add_row("Turn", str(state.turn))
    table.add_row("Fiscal regime", state.fiscal.regime_id.value)
    table.add_row("Headroom", f"£{state.headroom_bn:.1f}bn")
    table.add_row(
        "Compliant",
        "yes" if state.compliance.overall_compliant
        else "no: " + ", ".join(state.compliance.failed_tests),
    )
    table.add_row("Deficit", f"£{state.fiscal.deficit_bn:.1f}bn")
    table.add_row("Debt", f"{state.fiscal.debt_pct_gdp:.1f}% GDP")
    table.add_row("Approval", f"{state.polling.national_approval:.1f}%")
    table.add_row("Backbench mood", f"{state.sentiment.overall_mood:.1f}")
    table.add_row(
        "Rebellion",
        f"{state.sentiment.rebellion_ready} ready ({state.sentiment.rebellion_risk.value})",
    )
    table.add_row("PM trust", f"{rel.trust:.1f}")
    table.add_row("PM patience", f"{rel.patience:.1f}")
    table.add_row("Reshuffle risk", f"{rel.reshuffle_risk:.0f}")
    table.add_row("Trust trend", sparkline(rel.trust_history))
    if rel.pending_intervention is not None:
        table.add_row("Pending", rel.pending_intervention.reason.value)
    if rel.reshuffle is not None:
        table.add_row("Reshuffled", f"turn {rel.reshuffle.turn} ({rel.reshuffle.cause.value})")
    console.print(table)
    return True


def main() -> None:
    parser = argparse.ArgumentParser(description="Inspect Chancellor save games")
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy connection string (defaults to .env settings)",
    )
    parser.add_argument("--slot", default=None, help="Slot to inspect")
    parser.add_argument(
        "--verify", action="store_true", help="Verify the slot's payload digest"
    )
    args = parser.parse_args()

    service = SaveGameService(args.database_url or settings.database_url)
    service.initialize()

    if args.slot is None:
        list_slots(service)
        sys.exit(0)

    ok = True
    if args.verify:
        valid, message = service.verify_slot(args.slot)
        style = "green" if valid else "red"
        console.print(f"[bold {style}]{'✓' if valid else '✗'} {message}[/bold {style}]")
        ok = valid
    ok = inspect_slot(service, args.slot) and ok
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
