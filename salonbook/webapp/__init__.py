"""Flask application exposing the scheduling engine as JSON for the calendar UI."""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
from typing import Any, Callable

from flask import Flask, jsonify, request

from salonbook.scheduling.clock import date_key, parse_date_key
from salonbook.scheduling.feed import BookingFeed
from salonbook.scheduling.repository import ScheduleRepository
from salonbook.scheduling.slots import month_grid, week_dates
from salonbook.scheduling.system import SchedulingSystem, ValidationError
from salonbook.settings import Settings

logger = logging.getLogger(__name__)

FeedFactory = Callable[[Settings, ScheduleRepository], BookingFeed]


def _dates_for_view(view: str, anchor: dt.date) -> list[dt.date]:
    if view == "week":
        return week_dates(anchor)
    if view == "month":
        return [cell for cell in month_grid(anchor.year, anchor.month) if cell is not None]
    return [anchor]


def create_app(
    settings: Settings | None = None,
    system: SchedulingSystem | None = None,
    feed_factory: FeedFactory | None = None,
) -> Flask:
    """Create and configure the Flask application."""

    settings = settings or Settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.SECRET_KEY
    app.config["API_BASE_URL"] = settings.API_BASE_URL
    app.config["FETCH_BATCH_SIZE"] = settings.FETCH_BATCH_SIZE

    system = system or SchedulingSystem(settings=settings)
    make_feed = feed_factory or BookingFeed

    def run_feed(action: Callable[[BookingFeed], Any]) -> Any:
        async def runner() -> Any:
            async with make_feed(settings, system.repository) as feed:
                return await action(feed)

        return asyncio.run(runner())

    @app.errorhandler(ValidationError)
    def validation_failed(exc: ValidationError) -> Any:
        return jsonify({"error": str(exc)}), 400

    @app.get("/api/opening-hours")
    def opening_hours() -> Any:
        day = request.args.get("date")
        interval = system.opening_hours(day)
        return jsonify(
            {
                "date": date_key(parse_date_key(day)),
                "closed": interval is None,
                "opening_hours": interval.as_dict() if interval else None,
            }
        )

    @app.get("/api/slots")
    def slots() -> Any:
        return jsonify(
            system.available_slots(
                day=request.args.get("date"),
                staff_id=request.args.get("staff_id") or None,
                duration=request.args.get("duration", type=int),
            )
        )

    @app.get("/api/conflicts")
    def conflicts() -> Any:
        staff_id = request.args.get("staff_id")
        if not staff_id:
            raise ValidationError("staff_id is required")
        return jsonify(
            system.check_conflict(
                day=request.args.get("date"),
                staff_id=staff_id,
                start=request.args.get("start", ""),
                duration=request.args.get("duration", type=int) or 0,
            )
        )

    @app.post("/api/bookings/plan")
    def plan_booking() -> Any:
        payload = request.get_json(silent=True) or {}
        return jsonify(
            system.plan_booking(
                start=payload.get("start", ""),
                services=payload.get("services") or [],
                day=payload.get("date"),
                staff_id=payload.get("staff_id"),
            )
        )

    @app.get("/api/calendar/day")
    def calendar_day() -> Any:
        return jsonify(
            system.day_view(
                day=request.args.get("date"),
                staff_id=request.args.get("staff_id") or None,
            )
        )

    @app.get("/api/calendar/markers")
    def calendar_markers() -> Any:
        return jsonify(system.hour_markers())

    @app.get("/api/calendar/month")
    def calendar_month() -> Any:
        today = dt.date.today()
        return jsonify(
            system.month_view(
                year=request.args.get("year", type=int) or today.year,
                month=request.args.get("month", type=int) or today.month,
            )
        )

    @app.post("/api/refresh")
    def refresh() -> Any:
        payload = request.get_json(silent=True) or {}
        branch_id = payload.get("branch_id") or system.repository.branch_id
        if not branch_id:
            raise ValidationError("branch_id is required")
        anchor = parse_date_key(payload.get("date")) or dt.date.today()
        days = _dates_for_view(payload.get("view", "day"), anchor)
        force = bool(payload.get("force"))

        async def reload(feed: BookingFeed) -> Any:
            # Hours and staff are cached per branch; bookings are refetched every time.
            if system.repository.select_branch(branch_id) or force:
                await feed.load_branch(branch_id)
            return await feed.load_range(days)

        loaded = run_feed(reload)
        if loaded is None:
            return jsonify({"status": "superseded"}), 409
        return jsonify(
            {
                "status": "ok",
                "branch_id": str(branch_id),
                "dates": {key: len(rows) for key, rows in loaded.items()},
            }
        )

    @app.get("/api/bookings/pending")
    def pending_bookings() -> Any:
        bookings = run_feed(lambda feed: feed.fetch_pending())
        return jsonify([booking.as_dict() for booking in bookings])

    @app.post("/api/bookings/<booking_id>/<action>")
    def review_booking(booking_id: str, action: str) -> Any:
        if action not in ("approve", "decline"):
            raise ValidationError("Action must be approve or decline")
        ok = run_feed(lambda feed: getattr(feed, action)(booking_id))
        return jsonify({"booking_id": booking_id, "action": action, "ok": ok}), (200 if ok else 502)

    return app


__all__ = ["create_app"]
