"""Template reference model."""

from pydantic import BaseModel, ConfigDict, Field


class TemplateRef(BaseModel):
    """A container template in a storage pool."""
    model_config = ConfigDict(frozen=True)

    storage: str = Field(..., description="Storage pool holding the template")
    name: str = Field(..., description="Template file name")

    @property
    def volid(self) -> str:
        """Storage-qualified volume ID passed to pct create."""
        return f"{self.storage}:vztmpl/{self.name}"
