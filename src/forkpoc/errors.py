# src/forkpoc/errors.py


class ForkPocError(Exception):
    """Base class for every error the CLI turns into exit status 1."""


class UsageError(ForkPocError):
    pass


class MissingToolError(ForkPocError):
    pass


class ConfigError(ForkPocError):
    pass


class DestinationExistsError(ForkPocError):
    pass


class ExplorerError(ForkPocError):
    pass


class ToolchainError(ForkPocError):
    def __init__(self, description: str, cmd, returncode: int, stderr: str = ""):
        self.cmd = [str(c) for c in cmd]
        self.returncode = returncode
        self.stderr = stderr
        message = f"{description} failed (exit {returncode}): {' '.join(self.cmd)}"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        super().__init__(message)


class ImportSyntaxError(ForkPocError):
    def __init__(self, path: str, line_no: int, text: str):
        self.path = path
        self.line_no = line_no
        super().__init__(f"{path}:{line_no}: import without a quoted path: {text.strip()}")


class FlattenCollisionError(ForkPocError):
    def __init__(self, name: str, first: str, second: str):
        self.name = name
        self.paths = (first, second)
        super().__init__(f"Basename collision on '{name}': '{first}' and '{second}' differ")


class ScaffoldError(ForkPocError):
    pass
