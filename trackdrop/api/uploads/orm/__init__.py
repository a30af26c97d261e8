from trackdrop.api.uploads.orm.upload_model import UploadModel

__all__ = ["UploadModel"]
