"""Error taxonomy for the gallery service.

Every error carries the HTTP status it maps to and a message that is safe
to show to the end user. ``main.py`` renders them as ``{"message": ...}``.
"""


class GalleryError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(GalleryError):
    status_code = 401
    message = "Not authenticated"


class InvalidParameter(GalleryError):
    status_code = 400


class InvalidUpload(GalleryError):
    status_code = 400
    message = "Only image files are allowed (JPG, PNG, GIF)"


class UnreadableImage(GalleryError):
    status_code = 400
    message = "Could not read the image dimensions"


class IOFailure(GalleryError):
    status_code = 500
    message = "Could not store the image"


class NotFound(GalleryError):
    status_code = 404
    message = "Not found"


class Conflict(GalleryError):
    status_code = 400


class AnalysisFailed(GalleryError):
    """The description could not be generated.

    ``reason`` holds the underlying cause for logs; ``message`` stays generic
    because network, quota or provider problems are not actionable by users.
    """
    status_code = 502
    message = "Could not analyze the image"

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__()

    def __str__(self):
        return f"{self.message}: {self.reason}" if self.reason else self.message


class ServiceUnavailable(AnalysisFailed):
    pass


class ServiceError(AnalysisFailed):
    pass


class MalformedResponse(AnalysisFailed):
    pass
