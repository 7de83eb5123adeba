"""
Configuration de la connexion à la base de données.

Aucune session globale : le moteur et la fabrique de sessions sont créés par le
point d'entrée (lifespan de l'API) et stockés sur app.state. Les services
reçoivent toujours leur Session en argument.
"""

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """
    Crée le moteur SQLAlchemy.

    Pour SQLite :
    - PRAGMA foreign_keys=ON, sinon les ON DELETE CASCADE sont ignorés
    - chaque transaction démarre par BEGIN IMMEDIATE : le verrou d'écriture est pris
      avant les SELECT de vérification, ce qui sérialise les séquences
      "vérifier puis insérer" (inscriptions concurrentes)
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    engine = create_engine(database_url, connect_args={"check_same_thread": False})

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # Désactive la gestion implicite des transactions de pysqlite
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db(request: Request):
    """Dépendance FastAPI — fournit une session BDD et la ferme après usage."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_file_store(request: Request):
    """Dépendance FastAPI — stockage des supports de cours configuré au démarrage."""
    return request.app.state.file_store
