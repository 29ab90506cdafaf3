"""Line status merge rule.

A line's status is never set directly. It is the merge of two facts: whether
the balance is still positive and whether an admin disconnect is in force.
An admin disconnect sets the hold; the next reconnect, top-up or telemetry
report for the line overrides it, the last two re-deriving the status from
the balance alone.
"""

from decimal import Decimal

from sqlalchemy import ColumnElement, Numeric, and_, case, func, literal

from campus_energy.models.enums import LineStatus
from campus_energy.models.line import BALANCE_SCALE


def merge_line_status(remaining_kwh: Decimal, admin_hold: bool) -> LineStatus:
    """Derive the status from the balance sign and the admin hold."""
    if admin_hold or remaining_kwh <= 0:
        return LineStatus.DISCONNECTED
    return LineStatus.ACTIVE


def merge_line_status_expr(
    remaining_kwh: ColumnElement, admin_hold: ColumnElement
) -> ColumnElement:
    """SQL rendering of merge_line_status for use inside UPDATE statements."""
    return case(
        (
            and_(remaining_kwh > 0, admin_hold.is_(False)),
            literal(LineStatus.ACTIVE.value),
        ),
        else_=literal(LineStatus.DISCONNECTED.value),
    )


def round_balance_expr(balance: ColumnElement) -> ColumnElement:
    """Round balance arithmetic to the stored scale inside SQL.

    SQLite evaluates NUMERIC arithmetic as REAL, so ``1 - 0.1 * 10`` would
    otherwise leave a positive residue and keep an exhausted line active.
    """
    return func.round(
        balance, BALANCE_SCALE, type_=Numeric(precision=12, scale=BALANCE_SCALE)
    )
