"""Error types for the schema compiler."""


class CompilationError(Exception):
    """A single operation of the description could not be compiled.

    Raised inside the compiler and caught per operation; it never aborts
    compilation of the remaining operations.
    """

    def __init__(self, method: str, path: str, detail: str = "") -> None:
        self.method = method
        self.path = path
        self.detail = detail
        msg = f"Cannot compile {method.upper()} {path}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class UnresolvedReferenceError(ValueError):
    """A ``$ref`` points outside the document or at a missing component."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Unresolved reference: {ref}")
