from pydantic import BaseModel


class UploadResult(BaseModel):
    success: bool
    message: str
    url: str | None = None

    def body(self) -> dict:
        return self.model_dump(exclude_none=True)
