import os
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()



class Settings(BaseSettings):
    # CORE SETTINGS
    ENV: str = os.getenv("ENV", "development")
    DEBUG: bool = ENV == "development"
    PROJECT_NAME: str = "Well Control Engine"

    # LOGGING SETTINGS
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # PHYSICAL CONSTANTS
    GRAVITY: float = 9.80665  # m/s²

    # NUMERICAL SETTINGS
    EPSILON: float = float(os.getenv("EPSILON", "1e-9"))
    VOLUME_SOLVER_TOLERANCE: float = float(os.getenv("VOLUME_SOLVER_TOLERANCE", "1e-6"))  # m
    VOLUME_SOLVER_MAX_ITER: int = int(os.getenv("VOLUME_SOLVER_MAX_ITER", "60"))
    SWAB_MAX_INCREMENTS: int = int(os.getenv("SWAB_MAX_INCREMENTS", "10000"))

    # HYDRAULICS DEFAULTS
    LAMINAR_REYNOLDS_LIMIT: float = float(os.getenv("LAMINAR_REYNOLDS_LIMIT", "2000"))
    MIN_ANNULAR_CLEARANCE: float = float(os.getenv("MIN_ANNULAR_CLEARANCE", "1e-4"))  # m
    DEFAULT_THETA_600: float = float(os.getenv("DEFAULT_THETA_600", "60"))
    DEFAULT_THETA_300: float = float(os.getenv("DEFAULT_THETA_300", "40"))
    DEFAULT_MUD_DENSITY: float = float(os.getenv("DEFAULT_MUD_DENSITY", "1100"))  # kg/m³
    SABP_SAFETY_FACTOR: float = float(os.getenv("SABP_SAFETY_FACTOR", "1.15"))

    # PUMP SCHEDULE DEFAULTS
    DEFAULT_PUMP_RATE: float = float(os.getenv("DEFAULT_PUMP_RATE", "0.5"))  # m³/min

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
