class PipelineError(Exception):
    """Base class for fatal, stage-local failures of a video job."""


class DownloadServiceError(PipelineError):
    pass


class MediaTransferError(PipelineError):
    pass


class MediaUploadError(PipelineError):
    pass


class MediaFormatError(MediaUploadError):
    """The platform rejected the container or codec of the uploaded file."""


class TranscodeServiceError(PipelineError):
    pass


class NoLinkedAccountError(PipelineError):
    pass
