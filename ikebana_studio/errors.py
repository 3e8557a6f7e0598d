from __future__ import annotations


class IkebanaStudioError(Exception):
    """Base class for failures the CLI reports to the user."""


class EmptyCatalogError(IkebanaStudioError):
    """Nothing to render: the catalog has no (representable) works."""

    def __init__(self, message: str = "catalog is empty; add studies before generating artifacts"):
        super().__init__(message)


class UnresolvableReferenceError(IkebanaStudioError):
    def __init__(self, curriculum_id: int, work_id: str | None = None):
        self.curriculum_id = curriculum_id
        self.work_id = work_id
        detail = f" (work {work_id})" if work_id else ""
        super().__init__(f"unknown curriculum id {curriculum_id}{detail}")


class ImageDecodeError(IkebanaStudioError):
    def __init__(self, image_ref: str, reason: str):
        self.image_ref = image_ref
        super().__init__(f"failed to decode image {image_ref!r}: {reason}")


class CurriculumError(IkebanaStudioError):
    pass


class CatalogError(IkebanaStudioError):
    pass


class ConfigError(IkebanaStudioError):
    pass
