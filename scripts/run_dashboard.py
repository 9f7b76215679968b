"""
Terminal rendition of the live dashboard: prints the window on every tick
until interrupted.
"""
import asyncio
import os
import sys
import hydra
from omegaconf import DictConfig

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.analytics.application import AnalyticsApplicationBuilder
from src.common.config.manager import ConfigManager
from src.common.logging import setup_logger
from src.pulse.application.builder import PulseApplicationBuilder
from src.pulse.domain import NoiseBand

logger = setup_logger("src")


async def run(cfg: DictConfig):
    analytics_builder = AnalyticsApplicationBuilder(cfg)
    analytics = analytics_builder.build_service()
    analytics.enable_analytics()
    analytics.track_page_view("dashboard")

    pulse = PulseApplicationBuilder(cfg)

    def render(readings):
        if not readings:
            return
        latest = readings[-1]
        band = NoiseBand.classify(latest.noise).value
        source = "real" if latest.is_real else "estimated"
        adoption = runner.latest_estimate.percentage if runner.latest_estimate else 0.0
        print(
            f"{latest.time}  {latest.noise:5.1f} dB ({band}, {source})  "
            f"EV impact -{latest.ev_impact:.1f} dB  EV adoption {adoption:.2f}%  "
            f"[{len(readings)} points]"
        )

    runner = pulse.build_runner(analytics=analytics, listener=render)
    await runner.start()
    analytics.track_environmental_interaction("noise_chart", points=len(runner.session))
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.stop()
        analytics_builder.dispatcher.stop()
        logger.info(f"Storage: {analytics.storage_info()['metrics']}")


@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    cfg = ConfigManager.validate(cfg)
    try:
        asyncio.run(run(cfg))
    except KeyboardInterrupt:
        logger.info("Dashboard interrupted")

if __name__ == "__main__":
    main()
