class StructException(Exception):
    '''Base class to extend in order to throw exception in pngstruct.

    It takes the chain of the layers that caused the exception: each layer
    re-raising it appends its own name, so the innermost comes first.
    '''

    def __init__(self, message='', chain=None):
        self.chain = chain if chain is not None else []
        super().__init__(message)

    def __str__(self):
        message = super().__str__()
        if not self.chain:
            return message

        return '%s (at %s)' % (message, ' <- '.join(str(_) for _ in self.chain))


class FormatException(StructException):
    '''The data doesn't respect the format.'''
    pass


class UnpackException(FormatException):
    '''Not enough data to read what the format asks for.'''
    pass


class MagicException(FormatException):
    pass


class ChecksumException(FormatException):
    pass


class InvalidChunkTypeException(FormatException):
    pass


class InvalidLengthException(FormatException):
    '''The length of the chunk's payload is outside what its type allows.'''
    pass


class DuplicateChunkException(FormatException):
    '''A chunk type allowing a single occurrence was found again in the stream.'''
    pass


class MultipleNotAllowedException(FormatException):
    '''More than one chunk of a singleton type was collected.'''
    pass


class InvalidFieldValueException(FormatException):
    '''This is useful when is not possible to let an unknown value
    slip through: it is raised whatever the strictness.'''
    pass


class UnknownCriticalChunkException(FormatException):
    pass
