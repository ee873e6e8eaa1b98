"""Custom exceptions for the course registry."""


class RegistryError(Exception):
    """Base exception for course registry errors."""


class CourseNotFoundError(RegistryError):
    """Course with given ID does not exist."""


class StudentNotFoundError(RegistryError):
    """Student with given SSN does not exist."""


class TemplateNotFoundError(RegistryError):
    """Course template with given ID does not exist."""


class StudentExistsError(RegistryError):
    """Student with given SSN already exists."""


class TemplateExistsError(RegistryError):
    """Course template with given ID already exists."""


class InvalidCourseError(RegistryError):
    """Course dates or capacity are not acceptable."""


class CourseFullError(RegistryError):
    """Course has no free seats left."""


class AlreadyEnrolledError(RegistryError):
    """Student is already actively enrolled in the course."""


class AlreadyWaitlistedError(RegistryError):
    """Student is already on the waiting list for the course."""


class NotEnrolledError(RegistryError):
    """Student holds no active enrollment in the course."""
