"""Field types shared by the request schemas."""

from typing import Annotated

from pydantic import Field

# Primary keys are int4 columns; anything outside this range can't exist.
MAX_ID = 2**31 - 1

RowId = Annotated[int, Field(ge=1, le=MAX_ID)]
