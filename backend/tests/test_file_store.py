"""
Tests du stockage disque des supports (LocalFileStore).
"""

import pytest

from coursetrack.services.file_store import LocalFileStore


@pytest.fixture
def local_store(tmp_path):
    return LocalFileStore(str(tmp_path / "uploads"))


def test_ecriture_cree_les_repertoires(local_store):
    local_store.write("courses/3/123-abcd-notes.pdf", b"contenu")

    assert local_store.exists("courses/3/123-abcd-notes.pdf")
    assert (local_store.root / "courses" / "3" / "123-abcd-notes.pdf").read_bytes() == b"contenu"


def test_ecriture_refuse_ecrasement(local_store):
    local_store.write("courses/3/a.pdf", b"original")

    with pytest.raises(FileExistsError):
        local_store.write("courses/3/a.pdf", b"remplacement")

    # Le fichier du premier dépôt n'est pas touché
    assert (local_store.root / "courses" / "3" / "a.pdf").read_bytes() == b"original"


def test_chemin_hors_racine_refuse(local_store):
    with pytest.raises(ValueError):
        local_store.write("../evasion.txt", b"x")
    with pytest.raises(ValueError):
        local_store.delete("../../etc/passwd")


def test_suppression(local_store):
    local_store.write("courses/3/a.pdf", b"x")

    assert local_store.delete("courses/3/a.pdf") is True
    assert not local_store.exists("courses/3/a.pdf")


def test_suppression_fichier_absent(local_store):
    assert local_store.delete("courses/3/inconnu.pdf") is False


def test_suppression_retire_repertoire_vide(local_store):
    local_store.write("courses/3/a.pdf", b"x")
    local_store.write("courses/4/b.pdf", b"y")

    local_store.delete("courses/3/a.pdf")

    assert not (local_store.root / "courses" / "3").exists()
    assert (local_store.root / "courses" / "4").is_dir()
    assert local_store.root.is_dir()


def test_liste_chemins_relatifs(local_store):
    local_store.write("courses/3/a.pdf", b"x")
    local_store.write("courses/4/b.pdf", b"y")
    (local_store.root / "tmp.txt").write_bytes(b"hors prefixe")

    assert local_store.list("courses") == ["courses/3/a.pdf", "courses/4/b.pdf"]
    assert "tmp.txt" in local_store.list()


def test_liste_prefixe_inexistant(local_store):
    assert local_store.list("courses") == []
