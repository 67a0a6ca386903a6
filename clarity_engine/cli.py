"""
Clarity Engine - CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs (JSON files are parsed with the pydantic models).
  4. Execute the action (pure classification, or a pipeline stage).
  5. Report result to stdout.

Install and run::

    pip install -e .
    clarity-engine --help
    clarity-engine init-db
    clarity-engine classify-call "Can I get a quote for drain cleaning?"
    clarity-engine intake-call --user u1 --profile profile.json --transcript "..."
    clarity-engine run-scoring-pass --user u1 --profile profile.json --preferences prefs.json
    clarity-engine record-feedback --user u1 --rec-id 3 --action implemented
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, TypeVar

import typer
from pydantic import BaseModel, ValidationError

app = typer.Typer(
    name="clarity-engine",
    help="Signal classification and recommendation scoring for service businesses.",
    add_completion=False,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from clarity_engine.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from clarity_engine.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_model_or_exit(model_cls: type[ModelT], path: Optional[str], label: str) -> ModelT:
    """Parse a JSON file into ``model_cls``; a missing path yields the defaults."""
    if path is None:
        return model_cls()
    file_path = Path(path)
    if not file_path.exists():
        typer.echo(f"[ERROR] {label} file not found: {file_path}", err=True)
        raise typer.Exit(code=1)
    try:
        return model_cls.model_validate_json(file_path.read_text(encoding="utf-8"))
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid {label} in {file_path}:\n{exc}", err=True)
        raise typer.Exit(code=1)


def _prepare_db(config, db_path: Optional[str]) -> str:
    """Make sure the schema exists; return the DB path in use."""
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.schema import apply_schema

    target = db_path or config.database.db_path
    with connect_from_config(config.database, db_path=target) as conn:
        apply_schema(conn)
    return target


_DB_PATH_OPTION = typer.Option(None, "--db-path", help="Override DB path from config.")
_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times - all DDL uses IF NOT EXISTS.
    Also runs pending schema migrations.
    """
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.migrations import run_migrations
    from clarity_engine.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with connect_from_config(config.database, db_path=target_path) as conn:
        apply_schema(conn)
        migrations_applied = run_migrations(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Migrations applied: {migrations_applied}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print full config as JSON."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    caps = config.selection

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:     {config.database.db_path}")
    typer.echo(
        f"  Priority weights:  high={config.scoring.high_priority_weight:g} "
        f"medium={config.scoring.medium_priority_weight:g} "
        f"low={config.scoring.low_priority_weight:g}"
    )
    typer.echo(
        f"  Chaos thresholds:  >{config.scoring.high_chaos_threshold:g} simple, "
        f"<{config.scoring.low_chaos_threshold:g} advanced"
    )
    typer.echo(
        f"  Selection caps:    hourly={caps.hourly_cap} daily={caps.daily_cap} "
        f"weekly={caps.weekly_cap} monthly={'unbounded' if caps.monthly_cap is None else caps.monthly_cap}"
    )
    typer.echo(f"  Recommendation TTL: {config.lifecycle.recommendation_ttl_days} days")
    typer.echo(f"  Log level:         {config.logging.level}")
    typer.echo(f"  Debug mode:        {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


# ── Call handling ─────────────────────────────────────────────────────────────

@app.command("classify-call")
def classify_call(
    transcript: str = typer.Argument("", help="Call transcript; empty for a missed call."),
    services: Optional[List[str]] = typer.Option(
        None, "--service", help="Known service name (repeatable); checked before built-in topics."
    ),
    price_min: Optional[float] = typer.Option(None, "--price-min", help="Bottom of typical job value."),
    price_max: Optional[float] = typer.Option(None, "--price-max", help="Top of typical job value."),
) -> None:
    """Classify a transcript and print intent, urgency, topic and estimated value."""
    from clarity_engine.models.profile import BusinessProfile, PriceRange
    from clarity_engine.signals.intake import analyze_call

    price_range = None
    if price_min is not None and price_max is not None:
        try:
            price_range = PriceRange(min=price_min, max=price_max)
        except ValidationError as exc:
            typer.echo(f"[ERROR] Invalid price range: {exc}", err=True)
            raise typer.Exit(code=1)

    analysis = analyze_call(
        transcript, BusinessProfile(services=services or [], price_range=price_range)
    )
    signal = analysis.signal
    typer.echo(f"  Intent:          {signal.intent}")
    typer.echo(f"  Urgency:         {signal.urgency}")
    typer.echo(f"  Topic:           {signal.detected_topic or '-'}")
    typer.echo(
        f"  Estimated value: "
        f"{analysis.estimated_value if analysis.estimated_value is not None else 'unknown'}"
    )
    typer.echo(f"  Priority:        {analysis.priority}")
    typer.echo(f"  Summary:         {analysis.summary}")
    for action in analysis.follow_up_actions:
        typer.echo(f"    - {action}")


@app.command("intake-call")
def intake_call(
    user_id: str = typer.Option(..., "--user", help="Business user who received the call."),
    transcript: Optional[str] = typer.Option(
        None, "--transcript", help="Call transcript; omit for a missed call."
    ),
    profile_path: Optional[str] = typer.Option(None, "--profile", help="BusinessProfile JSON file."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Classify a call and open an opportunity if it warrants follow-up."""
    from clarity_engine.models.profile import BusinessProfile
    from clarity_engine.pipeline.call_intake import CallIntakeStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    profile = _load_model_or_exit(BusinessProfile, profile_path, "profile")
    target = _prepare_db(config, db_path)

    stage = CallIntakeStage(config=config, db_path=target)
    run = stage.run(user_id=user_id, transcript=transcript, profile=profile)

    opp = stage.last_opportunity
    if opp is None:
        typer.echo("[OK] Call classified; no opportunity opened.")
    else:
        typer.echo(
            f"[OK] Opportunity {opp.opportunity_id} opened: {opp.title} "
            f"(priority={opp.priority}, value={opp.estimated_value})"
        )
    typer.echo(f"  run_slug: {run.run_slug}")


@app.command("list-opportunities")
def list_opportunities(
    user_id: str = typer.Option(..., "--user"),
    status: Optional[str] = typer.Option(None, "--status", help="pending|contacted|converted|dismissed"),
    limit: int = typer.Option(50, "--limit"),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List a user's opportunities, newest first."""
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.repositories.opportunity_repo import OpportunityRepository
    from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target = _prepare_db(config, db_path)

    try:
        status_filter = OpportunityStatus(status) if status else None
    except ValueError:
        typer.echo(f"[ERROR] Unknown status '{status}'.", err=True)
        raise typer.Exit(code=1)

    with connect_from_config(config.database, db_path=target) as conn:
        opportunities = OpportunityRepository(conn).list_for_user(user_id, status_filter, limit)

    if not opportunities:
        typer.echo("No opportunities.")
        return
    for opp in opportunities:
        typer.echo(
            f"  #{opp.opportunity_id:<5} {opp.status:<10} {opp.priority:<6} "
            f"{opp.estimated_value if opp.estimated_value is not None else '-':>8}  {opp.title}"
        )


@app.command("transition-opportunity")
def transition_opportunity_cmd(
    opportunity_id: int = typer.Argument(..., help="Opportunity id."),
    target: str = typer.Argument(..., help="contacted|converted|dismissed"),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Move an opportunity to a new status."""
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.repositories.opportunity_repo import OpportunityRepository
    from clarity_engine.lifecycle.state_machine import InvalidTransition
    from clarity_engine.taxonomy.recommendation_taxonomy import OpportunityStatus

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target_db = _prepare_db(config, db_path)

    try:
        target_status = OpportunityStatus(target)
    except ValueError:
        typer.echo(f"[ERROR] Unknown status '{target}'.", err=True)
        raise typer.Exit(code=1)

    try:
        with connect_from_config(config.database, db_path=target_db) as conn:
            updated = OpportunityRepository(conn).transition(opportunity_id, target_status)
    except (InvalidTransition, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Opportunity {opportunity_id} is now {updated.status}.")


# ── Recommendations ───────────────────────────────────────────────────────────

@app.command("run-scoring-pass")
def run_scoring_pass(
    user_id: str = typer.Option(..., "--user"),
    profile_path: Optional[str] = typer.Option(None, "--profile", help="BusinessProfile JSON file."),
    preferences_path: str = typer.Option(..., "--preferences", help="UserPreferences JSON file."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Generate, score, select and persist recommendations for one user."""
    from clarity_engine.models.profile import BusinessProfile, UserPreferences
    from clarity_engine.pipeline.score import ScoringPassStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    profile = _load_model_or_exit(BusinessProfile, profile_path, "profile")
    preferences = _load_model_or_exit(UserPreferences, preferences_path, "preferences")
    target = _prepare_db(config, db_path)

    stage = ScoringPassStage(config=config, db_path=target)
    run = stage.run(user_id=user_id, profile=profile, preferences=preferences)

    typer.echo(
        f"[OK] {run.rows_processed} recommendation(s) active, "
        f"{stage.last_expired_count} superseded."
    )
    for rec in stage.last_records:
        typer.echo(f"  #{rec.rec_id:<5} {rec.score:>5g}  [{rec.complexity}] {rec.title}")
    typer.echo(f"  run_slug: {run.run_slug}")


@app.command("list-recommendations")
def list_recommendations(
    user_id: str = typer.Option(..., "--user"),
    show_all: bool = typer.Option(False, "--all", help="Include non-active recommendations."),
    explain: bool = typer.Option(False, "--explain", help="Show the score breakdown."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List a user's recommendations, best score first."""
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.repositories.recommendation_repo import RecommendationRepository
    from clarity_engine.recommendations.scorer import ScoreComponents, build_score_notes
    from clarity_engine.taxonomy.recommendation_taxonomy import RecommendationStatus

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target = _prepare_db(config, db_path)

    with connect_from_config(config.database, db_path=target) as conn:
        recs = RecommendationRepository(conn).list_for_user(
            user_id, status=None if show_all else RecommendationStatus.ACTIVE
        )

    if not recs:
        typer.echo("No recommendations.")
        return
    for rec in recs:
        typer.echo(f"  #{rec.rec_id:<5} {rec.status:<11} {rec.score:>5g}  {rec.title}")
        if explain and rec.score_components:
            parts = {k: v for k, v in rec.score_components.items() if k != "total"}
            typer.echo(f"          {build_score_notes(ScoreComponents(**parts))}")


@app.command("record-feedback")
def record_feedback(
    user_id: str = typer.Option(..., "--user"),
    rec_id: int = typer.Option(..., "--rec-id"),
    action: str = typer.Option(..., "--action", help="implemented|dismissed|rated"),
    rating: Optional[int] = typer.Option(None, "--rating", help="1-5, required for 'rated'."),
    time_spent: float = typer.Option(0.0, "--time-spent", help="Seconds spent on the item."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Record a user reaction and apply it to the recommendation."""
    from clarity_engine.lifecycle.state_machine import InvalidTransition
    from clarity_engine.models.engagement import EngagementEvent
    from clarity_engine.pipeline.feedback import FeedbackStage
    from clarity_engine.utils.time_utils import utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target = _prepare_db(config, db_path)

    try:
        event = EngagementEvent(
            recommendation_id=rec_id,
            user_id=user_id,
            action=action,
            rating=rating,
            time_spent_seconds=time_spent,
            occurred_at=utcnow(),
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid feedback: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        FeedbackStage(config=config, db_path=target).run(user_id=user_id, event=event)
    except (InvalidTransition, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Recorded '{event.action}' for recommendation {rec_id}.")


@app.command("expire-stale")
def expire_stale(
    user_id: Optional[str] = typer.Option(None, "--user", help="Limit to one user."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Expire active recommendations past their TTL."""
    from clarity_engine.pipeline.expire import ExpireStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target = _prepare_db(config, db_path)

    run = ExpireStage(config=config, db_path=target).run(user_id=user_id)
    typer.echo(f"[OK] Expired {run.rows_processed} recommendation(s).")


# ── Profiling ─────────────────────────────────────────────────────────────────

@app.command("engagement-summary")
def engagement_summary(
    user_id: str = typer.Option(..., "--user"),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Summarize a user's engagement history."""
    from clarity_engine.db.connection import connect_from_config
    from clarity_engine.db.repositories.engagement_repo import EngagementRepository
    from clarity_engine.profiling.behavior import summarize_engagement

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    target = _prepare_db(config, db_path)

    with connect_from_config(config.database, db_path=target) as conn:
        events = EngagementRepository(conn).list_for_user(user_id)

    summary = summarize_engagement(events)
    avg = f"{summary.average_rating:.2f}" if summary.average_rating is not None else "-"
    typer.echo(f"  Events:              {summary.total_events}")
    typer.echo(f"  Implemented:         {summary.implemented}")
    typer.echo(f"  Dismissed:           {summary.dismissed}")
    typer.echo(f"  Rated:               {summary.rated} (avg {avg})")
    typer.echo(f"  Time spent (s):      {summary.total_time_spent:g}")
    typer.echo(f"  Implementation rate: {summary.implementation_rate:.0%}")


@app.command("chaos-score")
def chaos_score(
    answers_path: str = typer.Option(..., "--answers", help="ChaosQuizResponse JSON file."),
) -> None:
    """Compute the chaos score, zone, indicator, quick wins and chaos factors."""
    from clarity_engine.models.profile import ChaosQuizResponse
    from clarity_engine.profiling.chaos import (
        calculate_chaos_score,
        chaos_factors,
        chaos_indicator,
        clarity_zone,
        quick_wins,
    )

    answers = _load_model_or_exit(ChaosQuizResponse, answers_path, "quiz answers")
    score = calculate_chaos_score(answers)
    typer.echo(f"  Chaos score:     {score}/100")
    typer.echo(f"  Zone:            {clarity_zone(score)}")
    typer.echo(f"  Chaos indicator: {chaos_indicator(score):g}")

    typer.echo("  Quick wins:")
    for win in quick_wins(answers):
        typer.echo(f"    - {win}")

    factors = chaos_factors(answers)
    typer.echo("  Chaos factors:" if factors else "  Chaos factors:   none")
    for factor in factors:
        typer.echo(f"    - {factor}")


if __name__ == "__main__":
    app()
