"""
Config Validator Service

Checks the syntax of the five source files before a run is allowed to
proceed. Errors block the run; warnings are reported only.
"""
import logging
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlsplit

from iptv_aggregator.config import AggregationPaths
from iptv_aggregator.schemas import FileValidationResult, ValidationSummary
from iptv_aggregator.services.template_service import CATEGORY_MARKER
from iptv_aggregator.utils.file_operations import read_source_lines


logger = logging.getLogger(__name__)

# Schemes that urlsplit handles poorly but players accept
_OPAQUE_SCHEMES = ("mitv://", "rtmp://")


def _entries(lines: list[str]):
    """Yield (line_number, line) for non-blank, non-comment lines"""
    for line_number, line in enumerate(lines, start=1):
        if line and not line.startswith("#"):
            yield line_number, line


def validate_subscribe(file_path: Path) -> FileValidationResult:
    result = FileValidationResult(path=str(file_path), stats={"total": 0, "valid": 0})
    lines = read_source_lines(file_path)
    if lines is None:
        result.errors.append("Subscription file does not exist")
        return result

    for line_number, line in _entries(lines):
        result.stats["total"] += 1

        if "://" not in line:
            result.errors.append(f"Line {line_number} is missing a protocol prefix: {line}")
            continue

        if not line.lower().startswith(_OPAQUE_SCHEMES):
            parts = urlsplit(line)
            if not parts.scheme or not parts.netloc:
                result.warnings.append(f"Line {line_number} URL did not pass standard parsing: {line}")
        result.stats["valid"] += 1

    if result.stats["total"] == 0:
        result.warnings.append("No subscription URLs found")

    return result


def validate_alias(file_path: Path) -> FileValidationResult:
    result = FileValidationResult(path=str(file_path), stats={"total": 0, "valid": 0})
    lines = read_source_lines(file_path)
    if lines is None:
        result.warnings.append("Alias file does not exist, skipping")
        return result

    for line_number, line in _entries(lines):
        result.stats["total"] += 1
        parts = [part.strip() for part in line.split(",") if part.strip()]
        if len(parts) < 2:
            result.errors.append(f"Line {line_number} needs at least one alias: {line}")
            continue
        result.stats["valid"] += 1

    return result


def validate_template(file_path: Path) -> FileValidationResult:
    result = FileValidationResult(path=str(file_path), stats={"categories": 0, "channels": 0})
    lines = read_source_lines(file_path)
    if lines is None:
        result.warnings.append("Template file does not exist, default ordering will be used")
        return result

    current_category = None
    for line_number, line in enumerate(lines, start=1):
        if not line:
            continue

        if CATEGORY_MARKER in line:
            current_category = line.replace(CATEGORY_MARKER, "", 1).strip()
            if not current_category:
                result.errors.append(f"Line {line_number} has an empty category name")
            else:
                result.stats["categories"] += 1
            continue

        if line.startswith("#"):
            result.warnings.append(f"Line {line_number} starts with # and is ignored in templates")
            continue

        if not current_category:
            result.errors.append(f"Line {line_number} channel has no category: {line}")
            continue

        result.stats["channels"] += 1

    if result.stats["categories"] == 0:
        result.warnings.append("No categories defined, the template will not take effect")

    return result


def validate_epg(file_path: Path) -> FileValidationResult:
    result = FileValidationResult(path=str(file_path), stats={"total": 0})
    lines = read_source_lines(file_path)
    if lines is None:
        result.warnings.append("EPG file does not exist, players will show no programme guide")
        return result

    for line_number, line in _entries(lines):
        result.stats["total"] += 1
        if "://" not in line:
            result.errors.append(f"Line {line_number} is not a valid URL: {line}")

    return result


def validate_logo(file_path: Path) -> FileValidationResult:
    result = FileValidationResult(path=str(file_path), stats={"total": 0, "valid": 0})
    lines = read_source_lines(file_path)
    if lines is None:
        result.warnings.append("Logo file does not exist, outputs will lack custom logos")
        return result

    for line_number, line in _entries(lines):
        result.stats["total"] += 1
        if len(line.split(",")) < 2:
            result.errors.append(f"Line {line_number} is missing a logo URL: {line}")
            continue
        result.stats["valid"] += 1

    return result


def aggregate_validation(results: dict[str, FileValidationResult]) -> ValidationSummary:
    errors: list[str] = []
    warnings: list[str] = []
    for file_result in results.values():
        errors.extend(f"{file_result.path}: {error}" for error in file_result.errors)
        warnings.extend(f"{file_result.path}: {warning}" for warning in file_result.warnings)

    return ValidationSummary(
        checked_at=datetime.now(timezone.utc).isoformat(),
        has_errors=bool(errors),
        errors=errors,
        warnings=warnings,
        files=results,
    )


def validate_source_configs(paths: AggregationPaths) -> ValidationSummary:
    """
    Validate every source file

    Args:
        paths: Resolved source file locations

    Returns:
        Summary with per-file results and flattened, path-prefixed messages
    """
    summary = aggregate_validation(
        {
            "subscribe": validate_subscribe(paths.subscribe),
            "alias": validate_alias(paths.alias),
            "template": validate_template(paths.template),
            "epg": validate_epg(paths.epg),
            "logo": validate_logo(paths.logo),
        }
    )

    for warning in summary.warnings:
        logger.warning(f"Config validation: {warning}")
    for error in summary.errors:
        logger.error(f"Config validation: {error}")
    logger.info(
        f"Config validation finished: {len(summary.errors)} errors, {len(summary.warnings)} warnings"
    )
    return summary
