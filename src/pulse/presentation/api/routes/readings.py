"""
API for the live noise chart and EV adoption figures.
"""
from typing import Optional

from fastapi import FastAPI, HTTPException

from ....application.builder import PulseApplicationBuilder
from ....application.summary import adoption_series, correlation_series, data_summary
from ....domain import NoiseBand
from .....common.utils import iso_timestamp

app = FastAPI()

# Singleton
_builder: Optional[PulseApplicationBuilder] = None

def init_pulse(builder: PulseApplicationBuilder):
    global _builder
    builder.build_session()
    builder.build_projector()
    _builder = builder

def get_builder() -> PulseApplicationBuilder:
    if _builder is None:
        raise HTTPException(500, "Pulse components not initialized")
    return _builder

@app.get("/pulse/readings")
async def get_readings():
    """Advances the window if the interval has elapsed, then returns it."""
    builder = get_builder()
    session = builder.session
    readings = session.update()
    latest = readings[-1] if readings else None

    current = None
    if latest is not None:
        current = {
            **latest.to_dict(),
            "band": NoiseBand.classify(latest.noise).value
        }
    return {
        "readings": [r.to_dict() for r in readings],
        "current": current,
        "lastUpdate": iso_timestamp(session.last_update) if session.last_update else None,
        "intervalSeconds": session.interval.total_seconds()
    }

@app.get("/pulse/adoption")
async def get_adoption():
    projector = get_builder().projector
    estimate = projector.estimate()
    return {
        "percentage": estimate.percentage,
        "strategy": estimate.strategy.value,
        "noiseReduction": projector.noise_reduction(estimate.percentage),
        "monthlyGrowth": projector.observed_monthly_growth(),
        "regions": projector.regional_adoption()
    }

@app.get("/pulse/summary")
async def get_summary():
    return data_summary(get_builder().selector)

@app.get("/pulse/correlation")
async def get_correlation():
    builder = get_builder()
    total_fleet = builder.pulse_cfg.projection.total_fleet
    return {
        "correlation": correlation_series(builder.dataset, total_fleet),
        "adoption": adoption_series(builder.dataset, total_fleet)
    }
