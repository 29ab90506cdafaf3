"""Tests for the usage estimator and the prediction endpoint."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select

from campus_energy.models.energy_log import EnergyLog
from campus_energy.models.prediction import AiPrediction
from campus_energy.services.prediction import MAX_TIPS, build_tips, estimate_usage

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=UTC)


def add_log(db, line_id: int, energy_kwh: str, age: timedelta) -> None:
    """Store a report that arrived ``age`` ago."""
    db.add(
        EnergyLog(
            line_id=line_id,
            timestamp=datetime.now(UTC) - age,
            power_w=Decimal("500"),
            voltage_v=Decimal("230"),
            current_a=Decimal("2"),
            energy_kwh=Decimal(energy_kwh),
        )
    )
    db.commit()


class TestEstimateUsage:
    """Unit tests for the pure estimator."""

    def test_no_logs_returns_sentinel(self) -> None:
        """Test that a line with no history gets the sentinel estimate."""
        estimate = estimate_usage(Decimal("30"), [], NOW, sentinel_days=999, budget_days=30)

        assert estimate.avg_daily_usage == Decimal("0")
        assert estimate.predicted_days_left == 999
        assert estimate.recommended_daily_usage == Decimal("1.00")

    def test_zero_usage_returns_sentinel(self) -> None:
        """Test that logs with no consumption do not divide by zero."""
        window = [(NOW - timedelta(days=2), Decimal("0")), (NOW - timedelta(hours=1), Decimal("0"))]

        estimate = estimate_usage(Decimal("30"), window, NOW, sentinel_days=999, budget_days=30)

        assert estimate.predicted_days_left == 999

    def test_average_over_days_spanned(self) -> None:
        """Test that usage is averaged over the days since the oldest log."""
        window = [(NOW - timedelta(days=3), Decimal("2")), (NOW - timedelta(days=1), Decimal("4"))]

        estimate = estimate_usage(Decimal("9"), window, NOW, sentinel_days=999, budget_days=30)

        assert estimate.avg_daily_usage == Decimal("2.00")
        # 9 / 2 = 4.5, floored
        assert estimate.predicted_days_left == 4
        assert estimate.recommended_daily_usage == Decimal("0.30")

    def test_same_day_history_counts_as_one_day(self) -> None:
        """Test that a window shorter than a day still divides by one."""
        window = [
            (NOW - timedelta(hours=2), Decimal("3")),
            (NOW - timedelta(hours=1), Decimal("2")),
        ]

        estimate = estimate_usage(Decimal("12"), window, NOW, sentinel_days=999, budget_days=30)

        assert estimate.avg_daily_usage == Decimal("5.00")
        assert estimate.predicted_days_left == 2

    def test_naive_timestamps_are_treated_as_utc(self) -> None:
        """Test that timestamps read back without tzinfo are handled."""
        naive = (NOW - timedelta(days=2)).replace(tzinfo=None)

        estimate = estimate_usage(
            Decimal("10"), [(naive, Decimal("4"))], NOW, sentinel_days=999, budget_days=30
        )

        assert estimate.avg_daily_usage == Decimal("2.00")
        assert estimate.predicted_days_left == 5

    def test_exhausted_balance(self) -> None:
        """Test that an empty balance predicts zero days."""
        window = [(NOW - timedelta(days=1), Decimal("5"))]

        estimate = estimate_usage(Decimal("0"), window, NOW, sentinel_days=999, budget_days=30)

        assert estimate.predicted_days_left == 0
        assert estimate.recommended_daily_usage == Decimal("0.00")
        assert estimate.tips[0].startswith("Your balance is exhausted")


class TestBuildTips:
    """Unit tests for the advice ladder."""

    def test_critical_first_and_capped(self) -> None:
        """Test that the most urgent tip leads and the list is capped."""
        tips = build_tips(
            avg_daily_usage=Decimal("12"),
            remaining_kwh=Decimal("20"),
            predicted_days_left=1,
            recommended_daily_usage=Decimal("0.67"),
            budget_days=30,
            high_usage_kwh=Decimal("10"),
        )

        assert len(tips) <= MAX_TIPS
        assert tips[0].startswith("Critical")
        assert any("High daily usage" in tip for tip in tips)

    def test_within_budget(self) -> None:
        """Test the encouragement for a line that will last the month."""
        tips = build_tips(
            avg_daily_usage=Decimal("1"),
            remaining_kwh=Decimal("300"),
            predicted_days_left=300,
            recommended_daily_usage=Decimal("10"),
            budget_days=30,
            high_usage_kwh=Decimal("10"),
        )

        assert tips[0].startswith("Great job")
        assert tips[-1].startswith("Switch appliances off")

    def test_week_warning(self) -> None:
        """Test the warning for a balance lasting under a week."""
        tips = build_tips(
            avg_daily_usage=Decimal("3"),
            remaining_kwh=Decimal("18"),
            predicted_days_left=6,
            recommended_daily_usage=Decimal("0.60"),
            budget_days=30,
            high_usage_kwh=Decimal("10"),
        )

        assert "6 days" in tips[0]
        assert "Stay under 0.60 kWh" in tips[1]

    def test_no_usage(self) -> None:
        """Test the hint when nothing has been reported."""
        tips = build_tips(
            avg_daily_usage=Decimal("0"),
            remaining_kwh=Decimal("50"),
            predicted_days_left=999,
            recommended_daily_usage=Decimal("1.67"),
            budget_days=30,
            high_usage_kwh=Decimal("10"),
        )

        assert tips[0].startswith("No usage recorded")
        assert len(tips) == 2


class TestPredictionEndpoint:
    """Tests for GET /api/predictions/{line_id}."""

    def test_prediction_from_recent_logs(
        self, client, db, make_line, make_user, auth_headers
    ) -> None:
        """Test the estimate for a student's own line, ignoring logs outside the window."""
        line = make_line(remaining="9", quota="50")
        student = make_user("s1@campus.edu", line=line)
        add_log(db, line.id, "100", timedelta(days=10))
        add_log(db, line.id, "2", timedelta(days=3))
        add_log(db, line.id, "4", timedelta(days=1))

        response = client.get(f"/api/predictions/{line.id}", headers=auth_headers(student))

        assert response.status_code == 200
        data = response.json()
        assert data["lineId"] == line.id
        assert Decimal(data["avgDailyUsage"]) == Decimal("2")
        assert data["predictedDaysLeft"] == 4
        assert Decimal(data["recommendedDailyUsage"]) == Decimal("0.30")
        assert 1 <= len(data["tips"]) <= MAX_TIPS

    def test_each_request_records_snapshot(self, client, db, make_line, admin_headers) -> None:
        """Test that every request appends an audit row."""
        line = make_line()

        client.get(f"/api/predictions/{line.id}", headers=admin_headers)
        client.get(f"/api/predictions/{line.id}", headers=admin_headers)

        db.expire_all()
        count = db.execute(
            select(func.count()).select_from(AiPrediction).where(AiPrediction.line_id == line.id)
        ).scalar_one()
        assert count == 2

    def test_no_history(self, client, make_line, admin_headers) -> None:
        """Test the sentinel over HTTP."""
        line = make_line(remaining="30")

        data = client.get(f"/api/predictions/{line.id}", headers=admin_headers).json()

        assert data["predictedDaysLeft"] == 999
        assert Decimal(data["recommendedDailyUsage"]) == Decimal("1")

    def test_student_cannot_read_other_line(
        self, client, make_line, make_user, auth_headers
    ) -> None:
        """Test that students only get predictions for their own line."""
        student = make_user("s1@campus.edu", line=make_line())
        other = make_line()

        response = client.get(f"/api/predictions/{other.id}", headers=auth_headers(student))

        assert response.status_code == 403

    def test_unknown_line(self, client, admin_headers) -> None:
        """Test a prediction for a missing line."""
        response = client.get("/api/predictions/9999", headers=admin_headers)

        assert response.status_code == 404
