from .photo_storage import LocalPhotoStorage, build_photo_key

__all__ = ["LocalPhotoStorage", "build_photo_key"]
