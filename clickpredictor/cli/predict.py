"""
Prediction CLI Commands

Commands for predicting landing page clicks from JSON input files.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError
from tqdm import tqdm

from ..core.config import Config, load_prediction_config
from ..core.observability import setup_logfire
from ..scoring.data_adapter import prepare_elements, prepare_page_context
from ..services.click_prediction.cpc_estimator import CPCEstimator
from ..services.click_prediction.engine import BATCH_FAILURE_WARNING, ClickPredictionEngine
from ..services.click_prediction.models import PageContext, PredictionReport, TrafficSource, DeviceType


# Configure logging
logging.basicConfig(
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    format="[%(asctime)s] %(levelname)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)

logger = logging.getLogger(__name__)

CAPTURE_KEYS = ("buttons", "links", "forms", "formFields")


def load_request(path: Path) -> Dict[str, Any]:
    """
    Read one prediction request from a JSON file.

    Two layouts are accepted: {"elements": [...], "context": {...},
    "detectedCtaId": ...} or a raw capture payload, optionally wrapped as
    {"domData": {...}, "url": ...}.

    Raises:
        click.ClickException: If the file is not valid JSON or matches neither layout
    """
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise click.ClickException(f"{path} must contain a JSON object")

    if "elements" in data:
        return {
            "elements": data["elements"],
            "context": data.get("context") or {},
            "detected_cta_id": data.get("detectedCtaId") or data.get("detected_cta_id"),
        }

    dom_data = data.get("domData", data)
    if isinstance(dom_data, dict) and any(key in dom_data for key in CAPTURE_KEYS):
        context = prepare_page_context(dom_data, url=data.get("url"))
        return {
            "elements": prepare_elements(dom_data),
            "context": context,
            "detected_cta_id": data.get("detectedCtaId"),
        }

    raise click.ClickException(
        f"{path} has neither 'elements' nor capture data ({', '.join(CAPTURE_KEYS)})"
    )


def _set_verbose(verbose: bool) -> None:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


def _build_engine(config_path: Optional[str]) -> ClickPredictionEngine:
    try:
        config = load_prediction_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    return ClickPredictionEngine(config)


def _write_report(report: PredictionReport, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, 'w') as f:
        json.dump(report.to_dict(), f, indent=2)


def _echo_summary(report: PredictionReport, top: int) -> None:
    click.echo(f"\n{'='*60}")
    click.echo(f"📊 CLICK PREDICTION SUMMARY")
    click.echo(f"{'='*60}")
    click.echo(f"💰 Estimated CPC: ${report.metadata.estimated_cpc:.2f}")
    if report.metadata.detected_industry:
        click.echo(f"🏷️  Industry: {report.metadata.detected_industry}")
    click.echo(f"🎯 Primary CTA: {report.metadata.primary_cta_id or 'none'}")
    click.echo(f"📈 Reliability: {report.reliability.level} ({report.reliability.score:.2f})")

    click.echo(f"\nTop {min(top, len(report.predictions))} elements:")
    for prediction in report.predictions[:top]:
        label = (prediction.text or "").strip()[:30]
        click.echo(
            f"  {prediction.element_id:<28} {label:<30} "
            f"{prediction.predicted_clicks:>8.1f} clicks  "
            f"{prediction.click_share:>5.1f}%  "
            f"wasted {prediction.wasted_clicks:.1f}"
        )

    analysis = report.wasted_click_analysis
    if analysis:
        click.echo(
            f"\n🗑️  Wasted clicks: {analysis.aggregate_wasted_clicks} "
            f"(${analysis.aggregate_wasted_spend:.2f})"
        )

    if report.form_analysis:
        click.echo(
            f"📝 Form bottleneck: {report.form_analysis.bottleneck_field} "
            f"({report.form_analysis.bottleneck_ctr:.1%} conversion)"
        )

    if report.warnings:
        click.echo(f"\n⚠️  WARNINGS:")
        for warning in report.warnings:
            click.echo(f"  - {warning}")


@click.command(name="predict")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Write the full report as JSON")
@click.option("--config", "config_path", type=click.Path(), help="Prediction config YAML")
@click.option("--impressions", type=int, help="Override total impressions")
@click.option("--top", type=int, default=10, show_default=True, help="Elements to show in the summary")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON instead of a summary")
@click.option("--verbose", is_flag=True, help="Show debug logging")
def predict_command(
    input_file: Path,
    output: Optional[Path],
    config_path: Optional[str],
    impressions: Optional[int],
    top: int,
    as_json: bool,
    verbose: bool,
):
    """
    Predict clicks for one landing page.

    INPUT_FILE holds either elements plus context or a raw page capture.

    Example:
        clickpredictor predict page.json -o report.json
    """
    _set_verbose(verbose)
    setup_logfire()

    request = load_request(input_file)
    if impressions is not None:
        context = request["context"]
        if isinstance(context, PageContext):
            request["context"] = context.model_copy(update={"total_impressions": impressions})
        else:
            request["context"] = {**context, "totalImpressions": impressions}

    engine = _build_engine(config_path)
    try:
        report = asyncio.run(engine.predict_clicks(
            request["elements"],
            request["context"],
            detected_cta_id=request["detected_cta_id"],
        ))
    except ValidationError as e:
        raise click.ClickException(f"Invalid page context: {e}")

    if output:
        _write_report(report, output)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    _echo_summary(report, top)
    if output:
        click.echo(f"\n✨ Report saved to {output}")


@click.command(name="batch")
@click.argument("input_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--output-dir", type=click.Path(file_okay=False, path_type=Path), help="Write one report per input file")
@click.option("--config", "config_path", type=click.Path(), help="Prediction config YAML")
@click.option("--verbose", is_flag=True, help="Show detailed errors")
def batch_command(input_dir: Path, output_dir: Optional[Path], config_path: Optional[str], verbose: bool):
    """
    Predict clicks for every JSON file in a directory.

    Example:
        clickpredictor batch captures/ --output-dir reports/
    """
    _set_verbose(verbose)
    setup_logfire()

    files = sorted(input_dir.glob("*.json"))
    if not files:
        click.echo(f"❌ No JSON files found in {input_dir}", err=True)
        return

    engine = _build_engine(config_path)
    results = {"completed": 0, "failed": 0, "errors": []}
    loaded = []

    with tqdm(total=len(files), desc="Loading pages") as pbar:
        for path in files:
            try:
                loaded.append((path, load_request(path)))
            except click.ClickException as e:
                logger.error(f"Skipping {path.name}: {e.message}")
                results["errors"].append({"file": path.name, "error": e.message})
                results["failed"] += 1
            pbar.update(1)

    reports = asyncio.run(engine.predict_batch([request for _, request in loaded]))

    for (path, _), report in zip(loaded, reports):
        if BATCH_FAILURE_WARNING in report.warnings:
            results["errors"].append({"file": path.name, "error": BATCH_FAILURE_WARNING})
            results["failed"] += 1
            continue

        results["completed"] += 1
        if output_dir:
            _write_report(report, output_dir / f"{path.stem}.prediction.json")

    # Show summary
    click.echo(f"\n{'='*60}")
    click.echo(f"📊 BATCH SUMMARY")
    click.echo(f"{'='*60}")
    click.echo(f"✅ Completed: {results['completed']}")
    click.echo(f"❌ Failed: {results['failed']}")
    click.echo(f"📈 Total: {len(files)}")

    if results['errors'] and verbose:
        click.echo(f"\n⚠️  ERRORS:")
        for err in results['errors']:
            click.echo(f"  - {err['file']}: {err['error'][:100]}")

    if output_dir and results['completed'] > 0:
        click.echo(f"\n✨ Reports saved to {output_dir}")


@click.command(name="cpc")
@click.option("--url", help="Landing page URL (used for industry detection)")
@click.option(
    "--traffic-source",
    type=click.Choice([source.value for source in TrafficSource]),
    default="unknown",
    show_default=True,
)
@click.option(
    "--device",
    type=click.Choice([device.value for device in DeviceType]),
    default="desktop",
    show_default=True,
)
@click.option("--industry", help="Industry vertical (detected from the URL when omitted)")
def cpc_command(url: Optional[str], traffic_source: str, device: str, industry: Optional[str]):
    """
    Estimate cost-per-click for a landing page.

    Example:
        clickpredictor cpc --url https://acme-saas.com --traffic-source paid
    """
    try:
        context = PageContext(url=url, traffic_source=traffic_source, device_type=device, industry=industry)
    except ValidationError as e:
        raise click.ClickException(f"Invalid options: {e}")

    estimator = CPCEstimator()
    enriched = estimator.estimate_context(context)
    estimate = estimator.calculate_estimated_cpc(enriched)
    breakdown = estimate.breakdown

    click.echo(f"💰 Estimated CPC: ${estimate.estimated_cpc:.2f}")
    click.echo(f"🏷️  Industry: {enriched.industry or 'unknown'} ({enriched.business_type})")
    click.echo(f"   Base CPC: ${breakdown.base_cpc:.2f}")
    click.echo(f"   Industry: x{breakdown.industry_multiplier:.2f}")
    click.echo(f"   Business type: x{breakdown.business_type_multiplier:.2f}")
    click.echo(f"   Traffic source: x{breakdown.traffic_source_multiplier:.2f}")
    click.echo(f"   Device: x{breakdown.device_multiplier:.2f}")
    click.echo(f"   Competition: x{breakdown.competition_multiplier:.2f}")
    click.echo(f"   Quality: x{breakdown.quality_multiplier:.2f}")
    click.echo(f"   Geo: x{breakdown.geo_multiplier:.2f}")
    click.echo(f"   Time: x{breakdown.time_multiplier:.2f}")
