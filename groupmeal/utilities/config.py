"""Configuration management for the group meal planner."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
LOG_LEVEL: Final[str] = os.getenv('LOG_LEVEL', 'INFO').upper()

# Scoring coefficients: score = alpha*overlap + beta*nutrition_fit + gamma*(1/cost)
SCORE_ALPHA: Final[float] = float(os.getenv('SCORE_ALPHA', '1.0'))
SCORE_BETA: Final[float] = float(os.getenv('SCORE_BETA', '0.5'))
SCORE_GAMMA: Final[float] = float(os.getenv('SCORE_GAMMA', '0.25'))
# Lower bound of an overlapping ingredient's weight, however abundant it already is
OVERLAP_MIN_WEIGHT: Final[float] = float(os.getenv('OVERLAP_MIN_WEIGHT', '0.1'))
# Soft signals folded into nutrition fit
PREFERENCE_BONUS: Final[float] = float(os.getenv('PREFERENCE_BONUS', '0.2'))
DISLIKE_PENALTY: Final[float] = float(os.getenv('DISLIKE_PENALTY', '0.3'))

# Soft wall-clock limit for one optimization run
PLANNING_DEADLINE_SECONDS: Final[float] = float(os.getenv('PLANNING_DEADLINE_SECONDS', '10'))

# Delivery-order text generation
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
