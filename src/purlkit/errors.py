"""Error taxonomy for purl parsing, normalization and validation.

Every error is a ``PurlError`` (itself a ``ValueError``) whose message is
prefixed with ``Invalid purl:``. Subclasses carry the structured details
(component, type, offending value) so callers can aggregate errors without
parsing messages.
"""


def format_message(message: str) -> str:
    """Return ``message`` as an ``Invalid purl: ...`` sentence fragment."""
    formatted = message
    if formatted and formatted[0].isupper() and not formatted[:2].isupper():
        formatted = formatted[0].lower() + formatted[1:]
    if formatted.endswith(".") and not formatted.endswith(".."):
        formatted = formatted[:-1]
    return f"Invalid purl: {formatted}"


class PurlError(ValueError):
    """Base class for all purl errors."""

    def __init__(self, message: str):
        super().__init__(format_message(message))


class MalformedInput(PurlError):
    """Input is not a string or does not follow the purl grammar."""


class EmptyInput(MalformedInput):
    """Input is empty or only whitespace."""

    def __init__(self):
        super().__init__("a non-empty purl string is required")


class MissingComponent(PurlError):
    """A component the grammar requires is absent."""

    component: str = ""

    def __init__(self, message: str | None = None):
        super().__init__(
            message or f'purl is missing the required "{self.component}" component'
        )


class MissingScheme(MissingComponent):
    component = "scheme"

    def __init__(self):
        super().__init__('purl is missing the required "pkg" scheme component')


class MissingType(MissingComponent):
    component = "type"


class MissingName(MissingComponent):
    component = "name"


class ForbiddenAuthority(PurlError):
    """A ``user:pass@host`` authority was found before the type."""

    def __init__(self):
        super().__init__('purl cannot contain a "user:pass@host:port" authority')


class DecodeError(PurlError):
    """Percent-decoding of a component failed."""

    def __init__(self, component: str, value: str):
        self.component = component
        self.value = value
        super().__init__(f'"{component}" component {value!r} is not validly percent-encoded')


class RequiredField(PurlError):
    """A required component is missing or empty."""

    def __init__(self, component: str):
        self.component = component
        super().__init__(f'"{component}" is a required component')


class TypeSpecificRule(PurlError):
    """A package type rejected the purl."""

    def __init__(self, type: str, detail: str):
        self.type = type
        self.detail = detail
        super().__init__(f"{type} {detail}")


class RequiredByType(RequiredField, TypeSpecificRule):
    """A package type requires a component that is absent."""

    def __init__(self, type: str, component: str):
        self.component = component
        self.type = type
        self.detail = f'requires a "{component}" component'
        PurlError.__init__(self, f"{type} {self.detail}")


class EmptyForbidden(TypeSpecificRule):
    """A package type forbids a component that is present."""

    def __init__(self, component: str, type: str):
        self.component = component
        super().__init__(type, f'"{component}" component must be empty')


class IllegalCharacter(PurlError):
    """A component contains a character its charset does not allow.

    ``detail`` overrides the default message tail, e.g. for leading-digit
    violations or type-specific charsets.
    """

    def __init__(
        self,
        component: str,
        value: str,
        detail: str | None = None,
        type: str | None = None,
    ):
        self.component = component
        self.value = value
        self.type = type
        prefix = f"{type} " if type else ""
        super().__init__(
            f'{prefix}{component} "{value}" {detail or "contains an illegal character"}'
        )


class IllegalQualifierKey(IllegalCharacter):
    """A qualifier key is empty, starts with a digit or has an illegal character."""

    def __init__(self, key: str, detail: str | None = None):
        super().__init__("qualifier", key, detail)


def reject(error: PurlError, throws: bool) -> bool:
    """Raise ``error`` when ``throws``, otherwise report failure as False."""
    if throws:
        raise error
    return False
