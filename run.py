import asyncio
from datetime import datetime, timezone
import time

import hydra
from loguru import logger
from omegaconf import DictConfig

from genecars.config.loader import AppConfig
from genecars.evolution.engine import GenerationManager
from genecars.evolution.listeners import LoggingListener
from genecars.evolution.storage.snapshot import load_snapshot, save_snapshot
from genecars.harness.synthetic import SyntheticTrackHarness
from genecars.runner.evolution_runner import EvolutionRunner
from genecars.utils.logger_setup import setup_logger
from genecars.utils.serve import serve_until_signal


async def run_experiment(app: AppConfig) -> None:
    start_time = time.time()

    logger.info("=" * 80)
    logger.info("Genetic Cars Evolution Run")
    logger.info("=" * 80)
    logger.info(f"Start time: {datetime.now(timezone.utc).isoformat()}")

    manager = GenerationManager.from_config(
        app.evolution, listeners=[LoggingListener()], seed=app.run.seed
    )
    if app.run.resume_from:
        manager.restore(load_snapshot(app.run.resume_from))
        logger.info(f"Resumed from {app.run.resume_from} at generation {manager.generation}")

    harness = SyntheticTrackHarness(
        seed=manager.seed, track_length=app.run.track_length
    )
    runner = EvolutionRunner(
        manager,
        harness,
        max_generations=app.run.max_generations,
        max_concurrent_evaluations=app.run.max_concurrent_evaluations,
    )

    try:
        runner.start()
        await serve_until_signal(runner.task, on_signal=runner.stop)
    except Exception as e:  # pylint: disable=broad-except
        logger.error(f"Evolution run failed: {e}")
        raise
    finally:
        await harness.close()
        if app.run.snapshot_path:
            save_snapshot(manager.snapshot(), app.run.snapshot_path)

        logger.info("High scores:")
        for entry in manager.high_scores:
            logger.info(f"  {entry}")
        duration = time.time() - start_time
        logger.info(f"Total run duration: {duration:.2f} seconds")
        logger.info(f"Status: {manager.get_status()}")


@hydra.main(version_base=None, config_path="config", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entrypoint with Hydra configuration management."""
    app = AppConfig.from_omegaconf(cfg)
    log_file_path = setup_logger(**app.logging.model_dump())
    logger.info(f"Log file: {log_file_path}")
    asyncio.run(run_experiment(app))


if __name__ == "__main__":
    main()
