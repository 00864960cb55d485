"""Command line interface for DebtSage."""

from __future__ import annotations

import functools
import json
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

import click

from .config import BaseConfig
from .errors import DebtError
from .infra.database import bootstrap_database
from .infra.repositories.debt import SQLModelDebtRepository
from .logging_config import setup_logging
from .services.debts import PayoffPlan
from .services.liabilities import upcoming_minimums
from .services.money import format_currency
from .services.planner import DebtPlanner
from .services.strategies import PayoffStrategy


@dataclass
class CLIContext:
    config: BaseConfig
    planner: DebtPlanner


def build_context(config: BaseConfig | None = None) -> CLIContext:
    """Wire config, logging, database and planner for a CLI session."""

    cfg = config or BaseConfig()
    setup_logging(cfg)
    _engine, session_factory = bootstrap_database(cfg)
    planner = DebtPlanner(SQLModelDebtRepository(session_factory), max_months=cfg.MAX_PAYOFF_MONTHS)
    return CLIContext(config=cfg, planner=planner)


def _handle_debt_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Surface engine failures as clean CLI errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except DebtError as exc:
            raise click.ClickException(str(exc)) from exc

    return wrapper


def _print_plan(plan: PayoffPlan, *, plan_id: int | None = None) -> None:
    header = f"Strategy: {plan.strategy.value}"
    if plan_id is not None:
        header += f" (plan #{plan_id})"
    click.echo(header)
    click.echo(f"Monthly amount: {format_currency(plan.monthly_amount)}")
    click.echo(f"Debt-free by: {plan.payoff_date.isoformat()} ({plan.months} months)")
    click.echo(f"Total interest: {format_currency(plan.total_interest)}")
    for summary in plan.debt_summaries:
        label = summary.name or f"Debt {summary.debt_id}"
        click.echo(
            f"  {label}: paid off in month {summary.payoff_month}, "
            f"interest {format_currency(summary.total_interest_paid)}"
        )


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


start_date_option = click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="First month of the plan (YYYY-MM-DD). Defaults to today.",
)


def _start(value: Any) -> date:
    return value.date() if value is not None else date.today()


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Plan debt payoff with the avalanche or snowball strategy."""

    if ctx.obj is None:
        ctx.obj = build_context()


@cli.command("add")
@click.argument("name")
@click.option("--balance", required=True, type=str)
@click.option("--rate", "interest_rate", required=True, type=str, help="Annual percentage rate")
@click.option("--min-payment", required=True, type=str)
@click.pass_obj
@_handle_debt_errors
def add_debt(obj: CLIContext, name: str, balance: str, interest_rate: str, min_payment: str) -> None:
    """Add a debt."""

    debt = obj.planner.add_debt(
        name=name, balance=balance, interest_rate=interest_rate, min_payment=min_payment
    )
    click.echo(f"Added debt #{debt.id}: {debt.name}")


@cli.command("list")
@click.pass_obj
def list_debts(obj: CLIContext) -> None:
    """List debts, largest balance first."""

    debts = obj.planner.list_debts()
    if not debts:
        click.echo("No debts recorded.")
        return
    for debt in debts:
        click.echo(
            f"#{debt.id} {debt.name}: {format_currency(debt.balance)} at {debt.interest_rate}% "
            f"(min {format_currency(debt.min_payment)})"
        )


@cli.command("plan")
@click.option(
    "--strategy",
    type=click.Choice([s.value for s in PayoffStrategy], case_sensitive=False),
    default=None,
    help="Defaults to DEBTSAGE_DEFAULT_STRATEGY.",
)
@click.option("--monthly-amount", required=True, type=str)
@start_date_option
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
@_handle_debt_errors
def plan_command(
    obj: CLIContext, strategy: str | None, monthly_amount: str, start_date: Any, as_json: bool
) -> None:
    """Calculate and save a payoff plan for all open debts."""

    plan_id, plan = obj.planner.calculate_plan(
        strategy or obj.config.DEFAULT_STRATEGY, monthly_amount, _start(start_date)
    )
    if as_json:
        _echo_json({"plan_id": plan_id, **plan.to_dict()})
        return
    _print_plan(plan, plan_id=plan_id)


@cli.command("show")
@click.argument("plan_id", type=int)
@start_date_option
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
@_handle_debt_errors
def show_plan(obj: CLIContext, plan_id: int, start_date: Any, as_json: bool) -> None:
    """Recompute a saved plan against current balances."""

    plan = obj.planner.get_plan(plan_id, start_date=start_date.date() if start_date else None)
    if as_json:
        _echo_json({"plan_id": plan_id, **plan.to_dict()})
        return
    _print_plan(plan, plan_id=plan_id)


@cli.command("compare")
@click.option("--monthly-amount", required=True, type=str)
@start_date_option
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
@_handle_debt_errors
def compare_command(obj: CLIContext, monthly_amount: str, start_date: Any, as_json: bool) -> None:
    """Compare avalanche and snowball for all open debts."""

    comparison = obj.planner.compare(monthly_amount, _start(start_date))
    if as_json:
        _echo_json(comparison.to_dict())
        return
    for plan in (comparison.avalanche, comparison.snowball):
        click.echo(
            f"{plan.strategy.value:<10} {plan.months:>4} months  "
            f"interest {format_currency(plan.total_interest)}  "
            f"debt-free {plan.payoff_date.isoformat()}"
        )
    click.echo(
        f"Avalanche saves {format_currency(comparison.interest_saved)} "
        f"and {comparison.months_saved} months; recommended: {comparison.recommended.value}"
    )


@cli.command("pay")
@click.argument("debt_id", type=int)
@click.argument("amount", type=str)
@click.option("--date", "payment_date", type=str, default=None, help="YYYY-MM-DD, defaults to today")
@click.option("--plan-id", type=int, default=None)
@click.pass_obj
@_handle_debt_errors
def pay_command(
    obj: CLIContext, debt_id: int, amount: str, payment_date: str | None, plan_id: int | None
) -> None:
    """Record a real payment against a debt."""

    payment, updated = obj.planner.record_debt_payment(
        debt_id, amount, payment_date or date.today().isoformat(), plan_id=plan_id
    )
    click.echo(
        f"Recorded payment #{payment.id} of {format_currency(payment.amount)}; "
        f"new balance {format_currency(updated)}"
    )


@cli.command("progress")
@click.argument("debt_id", type=int)
@click.pass_obj
@_handle_debt_errors
def progress_command(obj: CLIContext, debt_id: int) -> None:
    """Show payments made against a debt."""

    progress = obj.planner.progress(debt_id)
    click.echo(
        f"Paid {format_currency(progress.total_paid)} of "
        f"{format_currency(progress.original_balance)} ({progress.percent_paid}%)"
    )
    for point in progress.balance_history:
        click.echo(f"  {point.date.isoformat()}  {format_currency(point.balance)}")


@cli.command("upcoming")
@click.option("--months", default=3, show_default=True, type=click.IntRange(min=1))
@click.option("--due-day", default=15, show_default=True, type=click.IntRange(1, 28))
@click.pass_obj
def upcoming_command(obj: CLIContext, months: int, due_day: int) -> None:
    """List minimum payments due over the next few months."""

    schedule = upcoming_minimums(
        obj.planner.list_debts(), months_ahead=months, today=date.today(), due_day=due_day
    )
    for month in schedule:
        click.echo(f"{month.month}: {format_currency(month.total_amount)}")
        for payment in month.payments:
            click.echo(
                f"  {payment.due_date.isoformat()} {payment.debt_name}: "
                f"{format_currency(payment.amount)}"
            )


def main() -> None:  # pragma: no cover - console entry point
    cli()
