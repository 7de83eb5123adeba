"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Base de données (SQLite par défaut, PostgreSQL accepté)
    DATABASE_URL: str = "sqlite:///./coursetrack.db"

    # Supports de cours : racine du stockage local et plafond par fichier
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_SIZE_MB: int = 10
    # Rapprochement au démarrage : âge minimal (s) d'un fichier sans ligne avant suppression
    RECONCILE_GRACE_SECONDS: int = 300

    # Inscriptions : nombre de tentatives après une violation de contrainte concurrente
    ENROLL_MAX_ATTEMPTS: int = 3

    # Données de référence
    SEED_MAJORS: bool = True

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


settings = Settings()
