"""
Stockage des fichiers de supports de cours.

FileStore est l'interface minimale utilisée par le service des supports ;
LocalFileStore l'implémente sur le disque local (UPLOAD_DIR). Les tests
substituent une implémentation en mémoire.

Les chemins manipulés sont relatifs à la racine du stockage, séparés par "/".
"""

import logging
import os
from pathlib import Path
from typing import List, Protocol

logger = logging.getLogger(__name__)


class FileStore(Protocol):
    def write(self, path: str, data: bytes) -> None: ...

    def delete(self, path: str) -> bool: ...

    def exists(self, path: str) -> bool: ...

    def list(self, prefix: str = "") -> List[str]: ...


class LocalFileStore:
    """Stockage disque sous un répertoire racine (créé si absent)."""

    def __init__(self, root: str):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, path: str) -> Path:
        full = (self.root / path).resolve()
        # Refuse toute sortie de la racine (ex: "../../etc/passwd")
        if self.root != full and self.root not in full.parents:
            raise ValueError(f"Chemin hors du stockage : {path}")
        return full

    def write(self, path: str, data: bytes) -> None:
        """
        Écrit le fichier, en créant le répertoire parent à la demande.
        Lève FileExistsError si le chemin est déjà occupé (jamais d'écrasement).
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(full, "xb") as f:
                f.write(data)
        except FileExistsError:
            # Fichier appartenant à un autre dépôt : ne surtout pas le supprimer
            raise
        except OSError:
            # Écriture partielle : ne pas laisser un fichier tronqué derrière
            full.unlink(missing_ok=True)
            raise

    def delete(self, path: str) -> bool:
        """Supprime le fichier. Retourne False s'il n'existait pas."""
        full = self._resolve(path)
        try:
            full.unlink()
        except FileNotFoundError:
            return False
        self._prune_empty_parents(full.parent)
        return True

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def list(self, prefix: str = "") -> List[str]:
        """Liste les fichiers (chemins relatifs) sous prefix."""
        base = self._resolve(prefix) if prefix else self.root
        if not base.is_dir():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in base.rglob("*")
            if p.is_file()
        )

    def _prune_empty_parents(self, directory: Path) -> None:
        """Supprime les répertoires de cours devenus vides (jamais la racine)."""
        while directory != self.root and self.root in directory.parents:
            try:
                os.rmdir(directory)
            except OSError:
                return
            logger.debug("Répertoire vide supprimé : %s", directory)
            directory = directory.parent
