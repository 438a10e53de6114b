class WriteError(Exception):
    pass


class InputError(WriteError, ValueError):
    pass


class ResourceStateError(WriteError):
    pass


class CapabilityError(WriteError):
    pass
