"""Command-line interface for the vault collateral engine."""
from __future__ import annotations

import argparse
import asyncio
import sys
from decimal import Decimal, InvalidOperation

from .config import load_config
from .errors import VaultCollateralError
from .logging_setup import configure_logging
from .models import PendingOperation, Vault
from .pending import PendingStateLedger
from .risk import RiskMetrics, format_health_factor, format_ratio
from .services import CollateralService
from .units import btc_to_sats, format_btc

_OPERATIONS = {op.value: op for op in PendingOperation}


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="vault-collateral",
        description="BTC vault collateral matching and position risk",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("vaults", help="List vaults with their availability")
    sub.add_parser("steps", help="List collateral amounts that can be matched")

    select_parser = sub.add_parser("select", help="Resolve vaults for a BTC amount")
    select_parser.add_argument("amount", help="Collateral amount in BTC, e.g. 0.7")

    risk_parser = sub.add_parser("risk", help="Current and projected position risk")
    risk_parser.add_argument("--add-btc", default="0", help="BTC collateral to add")
    risk_parser.add_argument("--withdraw-btc", default="0", help="BTC collateral to withdraw")
    risk_parser.add_argument("--borrow", type=float, default=0.0, help="USD to borrow")
    risk_parser.add_argument("--repay", type=float, default=0.0, help="USD to repay")

    repay_parser = sub.add_parser("repay", help="Resolve approval and repay amounts")
    mode = repay_parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--amount", help="Partial repay amount in token units, e.g. 100.5")
    mode.add_argument("--full", action="store_true", help="Repay the full live debt")

    mark_parser = sub.add_parser("mark-pending", help="Record vaults just submitted on-chain")
    mark_parser.add_argument("operation", choices=sorted(_OPERATIONS))
    mark_parser.add_argument("vault_ids", nargs="+", metavar="VAULT_ID")

    sub.add_parser("pending", help="List vaults awaiting ledger confirmation")

    return parser


def _to_token_units(amount: str, decimals: int) -> int:
    try:
        value = Decimal(amount) * (Decimal(10) ** decimals)
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value != value.to_integral_value():
        raise ValueError(f"Amount {amount} exceeds {decimals} decimals")
    return int(value)


def _vault_note(vault: Vault, ledger: PendingStateLedger) -> str:
    entry = ledger.get(vault.id)
    if entry:
        return f"pending {entry.operation.value}"
    if ledger.can_pledge(vault):
        return "available"
    return "-"


def _print_metrics(label: str, metrics: RiskMetrics) -> None:
    print(
        f"{label}: collateral ${metrics.collateral_usd:,.2f} · debt ${metrics.debt_usd:,.2f} · "
        f"HF {format_health_factor(metrics.health_factor)} · "
        f"borrow ratio {format_ratio(metrics.borrow_ratio)} · {metrics.status.value}"
    )


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    service = CollateralService.from_config(config)

    if args.command == "vaults":
        vaults = await service.refresh()
        for vault in vaults:
            note = _vault_note(vault, service.ledger)
            print(f"{vault.id}  {format_btc(vault.amount)} BTC  {vault.status.value}  {note}")

    elif args.command == "steps":
        options = service.collateral_options(await service.refresh())
        suffix = "" if options.exact else "  (largest-first, may overshoot)"
        print("0" + suffix)
        for amount in options.amounts:
            print(format_btc(amount) + suffix)

    elif args.command == "select":
        target = btc_to_sats(args.amount)
        selection = service.select_vaults(await service.refresh(), target)
        if not selection.exact:
            print(f"approximate selection totalling {format_btc(selection.total)} BTC")
        for vault_id in selection.vault_ids:
            print(vault_id)

    elif args.command == "risk":
        delta = btc_to_sats(args.add_btc) - btc_to_sats(args.withdraw_btc)
        view = await service.risk_view(
            collateral_delta_sats=delta,
            debt_delta_usd=args.borrow - args.repay,
        )
        _print_metrics("current", view.current)
        _print_metrics("projected", view.projected)

    elif args.command == "repay":
        owner = config.account.address
        amount = None if args.full else _to_token_units(args.amount, config.reserve.token_decimals)
        plan = await service.resolve_repay(owner, amount)
        approval = plan.approval_amount if plan.needs_approval else "skip"
        print(f"approval: {approval}")
        print(f"repay: {'MAX' if plan.is_full else plan.repay_amount}")

    elif args.command == "mark-pending":
        service.mark_submitted(args.vault_ids, _OPERATIONS[args.operation])

    elif args.command == "pending":
        for entry in service.ledger.entries():
            print(f"{entry.vault_id}  {entry.operation.value}  {entry.submitted_at:.0f}")

    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except (VaultCollateralError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
