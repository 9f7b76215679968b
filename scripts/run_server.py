import os
import sys
import hydra
import uvicorn
from omegaconf import DictConfig

# Add src to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.api import create_app
from src.common.config.manager import ConfigManager
from src.common.logging import setup_logger

@hydra.main(version_base=None, config_path="../conf", config_name="config")
def main(cfg: DictConfig):
    logger = setup_logger("src")
    cfg = ConfigManager.validate(cfg)
    logger.info("Configuration loaded.")

    app = create_app(cfg)

    server_cfg = cfg.server
    logger.info(f"Starting server at http://{server_cfg.host}:{server_cfg.port}")
    uvicorn.run(app, host=server_cfg.host, port=server_cfg.port)

if __name__ == "__main__":
    main()
