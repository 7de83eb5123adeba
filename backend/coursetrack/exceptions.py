"""
Erreurs métier du moteur inscriptions / notes / supports.

- NotFound       : entité référencée absente (404)
- RuleViolation  : règle métier violée, jamais réessayée (400), sous-classe de ValueError
- DuplicateEntry : contrainte d'unicité (email, clé de section) (409)
- StorageFailure : panne d'infrastructure (500), après rollback / nettoyage
"""


class CourseTrackError(Exception):
    pass


class NotFound(CourseTrackError, LookupError):
    pass


class RuleViolation(CourseTrackError, ValueError):
    pass


class AlreadyEnrolled(RuleViolation):
    pass


class SectionConflict(RuleViolation):
    """Élève déjà inscrit dans une autre section du même cours (même préfixe + numéro)."""

    def __init__(self, message: str, held_section: str):
        super().__init__(message)
        self.held_section = held_section


class InvalidGrade(RuleViolation):
    pass


class UnsupportedType(RuleViolation):
    pass


class TooLarge(RuleViolation):
    pass


class DuplicateEntry(RuleViolation):
    pass


class StorageFailure(CourseTrackError, RuntimeError):
    pass
