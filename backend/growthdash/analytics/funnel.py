# backend/growthdash/analytics/funnel.py
"""Funnel conversion: stage-to-stage and first-to-last rates, in percent."""
import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from growthdash.analytics.comparison import ComparisonEntry

logger = logging.getLogger(__name__)


class FunnelStage(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    value: float
    comparisons: Optional[List[ComparisonEntry]] = None


class FunnelResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    stages: List[FunnelStage]
    step_rates: List[float]
    overall_rate: Optional[float] = None
    overall_from_override: bool = False


def step_rate(prev_value: float, value: float) -> float:
    # a zero previous stage counts as a pass-through, not a division error
    if prev_value == 0:
        return 100.0
    return value * 100.0 / prev_value


def overall_rate(stages: Sequence[FunnelStage]) -> Optional[float]:
    if len(stages) < 2:
        return None
    return step_rate(stages[0].value, stages[-1].value)


def reduce_funnel(stages: Sequence[FunnelStage], override: Optional[float] = None) -> FunnelResult:
    """
    Rates for an ordered funnel. Values are not required to shrink from stage
    to stage; a rising step simply shows a rate above 100.
    An `override` (from upstream aggregation) replaces the computed overall rate.
    """
    stages = list(stages)
    rates = [step_rate(stages[i].value, stages[i + 1].value) for i in range(len(stages) - 1)]
    if override is not None:
        return FunnelResult(stages=stages, step_rates=rates, overall_rate=float(override), overall_from_override=True)

    overall = overall_rate(stages)
    if overall is not None and stages[0].value and overall > 100.0:
        logger.info("Funnel %s -> %s widens: %.1f%%", stages[0].title, stages[-1].title, overall)
    return FunnelResult(stages=stages, step_rates=rates, overall_rate=overall)
