"""
All-Server Backend — Navigation Site Schemas
==============================================

What:  Request/response models for /api/navigation, the partial-update patch,
       and the upload response.

Partial updates:
    NavigationSiteUpdate.to_patch() turns a request body into a
    NavigationSitePatch, which records per field whether a value was set.
    A field left at UNSET is not written; a description explicitly set to ""
    or null IS written. NavigationSitePatch.assignments() is the builder that
    feeds the UPDATE statement.
"""

from dataclasses import dataclass, fields
from typing import Dict, Optional, Union

from pydantic import BaseModel, Field


class _Unset:
    """Marker type for a patch field the caller did not supply."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class NavigationSiteResponse(BaseModel):
    """A navigation site row (also the 201 body of create)."""
    id: int = Field(description="导航站点ID")
    logo: Optional[str] = Field(default=None, description="SVG文件路径")
    url: Optional[str] = Field(default=None, description="网站URL")
    name: Optional[str] = Field(default=None, description="网站名称")
    description: Optional[str] = Field(default=None, description="网站描述")

    model_config = {"from_attributes": True}


class UploadedFileInfo(BaseModel):
    filename: str = Field(description="生成的文件名", examples=["1736150400000-logo.svg"])
    path: str = Field(description="公开访问路径", examples=["/uploads/svg/1736150400000-logo.svg"])
    size: int = Field(description="文件大小（字节）", examples=[1024])


class UploadResponse(BaseModel):
    """201 body of POST /api/navigation/upload."""
    message: str = Field(default="SVG文件上传成功", description="成功消息")
    file: UploadedFileInfo


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NavigationSiteCreate(BaseModel):
    """
    Body of POST /api/navigation.

    Fields are optional at the schema level so that a missing logo/url/name
    produces the API's own 400 message instead of a framework error.
    """
    logo: Optional[str] = Field(
        default=None, description="SVG文件路径，必须以/uploads/svg/开头并以.svg结尾"
    )
    url: Optional[str] = Field(default=None, description="网站URL")
    name: Optional[str] = Field(default=None, description="网站名称")
    description: Optional[str] = Field(default=None, description="网站描述")


class NavigationSiteUpdate(BaseModel):
    """Body of PUT /api/navigation/{id}; every field may be omitted."""
    logo: Optional[str] = Field(
        default=None, description="SVG文件路径，必须以/uploads/svg/开头并以.svg结尾"
    )
    url: Optional[str] = Field(default=None, description="网站URL")
    name: Optional[str] = Field(default=None, description="网站名称")
    description: Optional[str] = Field(default=None, description="网站描述")

    def to_patch(self) -> "NavigationSitePatch":
        """
        Build the patch for this body.

        logo/url/name count as set only when non-empty; description counts
        as set whenever the key was present in the JSON body.
        """
        values: Dict[str, Optional[str]] = {}
        for name in ("logo", "url", "name"):
            value = getattr(self, name)
            if value:
                values[name] = value
        if "description" in self.model_fields_set:
            values["description"] = self.description
        return NavigationSitePatch(**values)


# ══════════════════════════════════════════════════════════════════════════
# Patch
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class NavigationSitePatch:
    logo: Union[str, _Unset] = UNSET
    url: Union[str, _Unset] = UNSET
    name: Union[str, _Unset] = UNSET
    description: Union[str, None, _Unset] = UNSET

    def assignments(self) -> Dict[str, Optional[str]]:
        """Column → value for every field that was set, in column order."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.assignments()
