"""Anomaly detection - flag prices far from a product's historical mean"""
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional

from pricecheck.services.price_calculations import to_decimal

# History size at which data confidence saturates
FULL_CONFIDENCE_POINTS = 10


@dataclass
class AnomalyReport:
    """Advisory result; nothing is blocked on an anomaly"""
    is_anomalous: bool
    confidence: float
    reason: str  # 'normal', 'significantly_higher', 'significantly_lower', 'no_valid_data', 'invalid_price'
    deviation: Optional[float] = None
    average_price: Optional[float] = None
    current_price: Optional[float] = None
    data_points: int = 0


@dataclass
class AnomalyFlag:
    """Manual review tag for a suspicious record"""
    record_id: str
    report: AnomalyReport
    flagged_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: str = "flagged"
    review_required: bool = True


@dataclass
class AnomalyValidation:
    validated: bool
    has_original_photo: bool
    validated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    validation_method: str = "manual"


def _valid_prices(prices: Iterable[Any]) -> List[float]:
    valid = []
    for price in prices:
        number = to_decimal(price)
        if number is not None and number > 0:
            valid.append(float(number))
    return valid


def detect_anomaly(
    current_price: Any,
    historical_prices: Iterable[Any],
    deviation_threshold: float = 0.5,
    min_confidence: float = 0.8,
) -> AnomalyReport:
    """
    Compare a price with the mean of its history.

    Confidence averages how much history there is (saturating at 10 points)
    with how stable it is (1 - stddev/mean). A price is anomalous only when
    it deviates by more than the threshold AND confidence clears the minimum.
    """
    valid = _valid_prices(historical_prices)
    if not valid:
        return AnomalyReport(is_anomalous=False, confidence=0.0, reason="no_valid_data")

    current = to_decimal(current_price)
    if current is None:
        return AnomalyReport(
            is_anomalous=False,
            confidence=0.0,
            reason="invalid_price",
            data_points=len(valid),
        )
    current = float(current)

    count = len(valid)
    mean = sum(valid) / count
    variance = sum((price - mean) ** 2 for price in valid) / count
    std_dev = math.sqrt(variance)

    deviation = abs(current - mean) / mean

    data_confidence = min(count / FULL_CONFIDENCE_POINTS, 1.0)
    stability_confidence = max(0.0, 1 - std_dev / mean)
    confidence = (data_confidence + stability_confidence) / 2

    is_anomalous = deviation > deviation_threshold and confidence > min_confidence

    reason = "normal"
    if is_anomalous:
        reason = "significantly_higher" if current > mean else "significantly_lower"

    return AnomalyReport(
        is_anomalous=is_anomalous,
        confidence=confidence,
        reason=reason,
        deviation=deviation,
        average_price=mean,
        current_price=current,
        data_points=count,
    )


def flag_anomalous_price(record_id: str, report: AnomalyReport) -> AnomalyFlag:
    """Tag a record for manual review. No enforcement happens here."""
    return AnomalyFlag(record_id=record_id, report=report)


def validate_anomalous_price(original_photo: Any, user_confirmation: bool) -> AnomalyValidation:
    """Record a user's manual confirmation of a flagged price."""
    return AnomalyValidation(
        validated=bool(user_confirmation),
        has_original_photo=bool(original_photo),
    )
