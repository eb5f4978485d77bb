import logging
from datetime import datetime

import click

from config.constants import Currency, RateKind
from config.settings import (
    DEFAULT_CAPITALIZATION_PER_YEAR, DEFAULT_COK_ANNUAL, DEFAULT_EXCHANGE_RATE,
    DEFAULT_TERM_YEARS, LOG_LEVEL, MAX_TERM_YEARS, MIN_TERM_YEARS,
)
from core.comparison import compare_grace_options
from core.indicators import internal_rate
from core.rates import annualize, monthly_rate
from core.schedule import schedule_to_frame
from core.simulation import simulate
from data_manager.data_validator import LoanValidationError
from data_manager.excel_handler import export_excel, read_cashflows_csv, write_csv
from data_manager.schema import (
    AncillaryCharges, LoanTerms, PropertyQuote, SimulationRequest, UpfrontCosts,
)
from utils.formatters import fmt_amount, fmt_months, fmt_percent, fmt_rate


def _percent(value):
    """命令行输入的是百分比，引擎使用小数"""
    return None if value is None else value / 100


def _loan_options(f):
    options = [
        click.option('--rate-type', type=click.Choice([e.value for e in RateKind]), default=RateKind.EFFECTIVE.value, help='TEA or TNA'),
        click.option('--annual-rate', type=float, required=True, help='Annual rate in percent'),
        click.option('--capitalization', type=int, default=DEFAULT_CAPITALIZATION_PER_YEAR, help='Capitalizations per year (TNA only)'),
        click.option('--term-years', type=click.IntRange(MIN_TERM_YEARS, MAX_TERM_YEARS), default=DEFAULT_TERM_YEARS, help='Loan term in years'),
        click.option('--grace-total', type=int, default=0, help='Total grace months'),
        click.option('--grace-partial', type=int, default=0, help='Partial grace months'),
        click.option('--principal', type=float, help='Amount to finance (when no property price is given)'),
        click.option('--price', type=float, help='Property price'),
        click.option('--initial-payment', type=float, default=0.0, help='Initial payment'),
        click.option('--bonus', type=float, default=0.0, help='Techo Propio / BBP bonus'),
        click.option('--currency', type=click.Choice([e.value for e in Currency]), default=Currency.PEN.value, help='Property currency'),
        click.option('--exchange-rate', type=float, default=DEFAULT_EXCHANGE_RATE, help='PEN per USD'),
        click.option('--desgravamen', type=float, default=0.0, help='Desgravamen monthly rate in percent'),
        click.option('--property-insurance', type=float, default=0.0, help='Property insurance annual rate in percent'),
        click.option('--portes', type=float, default=0.0, help='Monthly postage fee'),
        click.option('--periodic-commission', type=float, default=0.0, help='Monthly periodic commission'),
        click.option('--admin-expenses', type=float, default=0.0, help='Monthly administrative expenses'),
        click.option('--upfront', type=float, default=0.0, help='Upfront costs folded into the principal'),
        click.option('--cok', type=float, default=DEFAULT_COK_ANNUAL * 100, help='Annual COK in percent'),
        click.option('--start-date', type=str, help='Disbursement date (YYYY-MM-DD)'),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def _build_request(params) -> SimulationRequest:
    if params["price"] is None and params["principal"] is None:
        raise click.UsageError("Provide --principal or --price.")
    if params["price"] is not None and params["principal"] is not None:
        raise click.UsageError("Use either --principal or --price, not both.")

    quote = None
    if params["price"] is not None:
        quote = PropertyQuote(
            price=params["price"],
            initial_payment=params["initial_payment"],
            currency=Currency(params["currency"]),
            bonus_amount=params["bonus"],
        )
    terms = LoanTerms.from_years(
        params["principal"] or 0.0,
        _percent(params["annual_rate"]),
        params["term_years"],
        rate_kind=RateKind(params["rate_type"]),
        capitalization_per_year=params["capitalization"],
        grace_total_months=params["grace_total"],
        grace_partial_months=params["grace_partial"],
    )
    start = params["start_date"]
    return SimulationRequest(
        terms=terms,
        property=quote,
        ancillary=AncillaryCharges(
            desgravamen_rate=_percent(params["desgravamen"]),
            property_insurance_annual_rate=_percent(params["property_insurance"]),
            postage_fee=params["portes"],
            periodic_commission=params["periodic_commission"],
            admin_expenses=params["admin_expenses"],
        ),
        # 命令行只接受合计金额
        upfront=UpfrontCosts(notarial=params["upfront"]),
        cok_annual=_percent(params["cok"]),
        exchange_rate=params["exchange_rate"],
        start_date=datetime.strptime(start, '%Y-%m-%d').date() if start else None,
    )


@click.group()
@click.option('--verbose', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """A CLI for the HogarFin loan simulator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option('--rate-type', type=click.Choice([e.value for e in RateKind]), required=True, help='TEA or TNA')
@click.option('--annual-rate', type=float, required=True, help='Annual rate in percent')
@click.option('--capitalization', type=int, default=DEFAULT_CAPITALIZATION_PER_YEAR, help='Capitalizations per year (TNA only)')
def tem(rate_type, annual_rate, capitalization):
    """Converts an annual rate (TEA/TNA) into the effective monthly rate."""
    try:
        value = monthly_rate(rate_type, _percent(annual_rate), capitalization)
    except LoanValidationError as e:
        raise click.BadParameter(str(e))
    click.echo(f"TEM: {fmt_rate(value)}")


@cli.command('simulate')
@_loan_options
@click.option('--csv', 'csv_path', type=click.Path(dir_okay=False), help='Export the schedule as CSV')
@click.option('--xlsx', 'xlsx_path', type=click.Path(dir_okay=False), help='Export the schedule as Excel')
@click.option('--client', type=str, default="", help='Client name for the export header')
@click.option('--show-schedule', is_flag=True, help="Print the full schedule as CSV")
def simulate_command(csv_path, xlsx_path, client, show_schedule, **params):
    """Runs a loan simulation and prints its indicators."""
    try:
        result = simulate(_build_request(params))
    except LoanValidationError as e:
        raise click.ClickException(str(e))

    ind = result.indicators
    click.echo(f"Principal: {fmt_amount(result.principal)}")
    click.echo(f"Term: {fmt_months(len(result.schedule))}")
    click.echo(f"TEM: {fmt_rate(result.monthly_rate)}")
    click.echo(f"Installment: {fmt_amount(result.monthly_payment)}")
    click.echo(f"Grace: {result.grace_type.label} ({result.grace_months})")
    click.echo(f"VAN: {fmt_amount(ind.van)}")
    click.echo(f"TIR (monthly): {fmt_percent(ind.tir_monthly)}")
    click.echo(f"TIR (annual): {fmt_percent(ind.tir_annual)}")
    click.echo(f"TCEA: {fmt_percent(ind.tcea)}")

    if show_schedule:
        click.echo(schedule_to_frame(result.schedule, result.start_date).to_csv(index=False))
    if csv_path:
        click.echo(f"CSV: {write_csv(result, csv_path, client=client)}")
    if xlsx_path:
        click.echo(f"Excel: {export_excel(result, xlsx_path, client=client)}")


@cli.command('tir')
@click.option('--schedule-file', type=click.Path(exists=True), required=True, help='Schedule CSV with a cashflow column')
@click.option('--principal', type=float, help='Disbursed principal (defaults to the schedule opening balance)')
def tir_command(schedule_file, principal):
    """Calculates the monthly and annual TIR of a schedule file."""
    try:
        cashflows, opening = read_cashflows_csv(schedule_file)
    except ValueError as e:
        raise click.ClickException(str(e))
    principal = principal if principal is not None else opening
    if principal is None:
        raise click.UsageError("Provide --principal; the file has no balance column.")

    monthly = internal_rate(principal, cashflows)
    click.echo(f"TIR (monthly): {fmt_percent(monthly)}")
    click.echo(f"TIR (annual): {fmt_percent(annualize(monthly))}")


@cli.command('compare-grace')
@_loan_options
@click.option('--months', type=int, required=True, help='Grace months to compare')
def compare_grace_command(months, **params):
    """Compares no grace, total grace and partial grace for the same loan."""
    params.update(grace_total=0, grace_partial=0)
    try:
        comp_df = compare_grace_options(_build_request(params), months)
    except LoanValidationError as e:
        raise click.ClickException(str(e))
    click.echo("--- Grace Comparison ---")
    click.echo(comp_df.to_string(index=False))


if __name__ == "__main__":
    cli()
