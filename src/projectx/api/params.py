"""Path parameter types shared by the routers.

Learn: ids are bounded to the int4 range of the primary keys, so an id
like 0 or 10**20 fails validation (400) instead of reaching the store.
"""

from typing import Annotated

from fastapi import Path

from projectx.schemas.common import MAX_ID

PathId = Annotated[int, Path(ge=1, le=MAX_ID)]
