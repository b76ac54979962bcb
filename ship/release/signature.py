"""Parse the detached signature out of `sign_update` output.

`sign_update` prints the attributes of an appcast enclosure, e.g.:

    sparkle:edSignature="pB5...Q==" length="1048576"

Only the `key="value"` form is understood. A missing attribute is an
explicit "signature not found" error, never an empty signature.
"""

from __future__ import annotations

import re

from ship.core.result import Err, Ok, Result
from ship.release.errors import ReleaseError
from ship.release.model import ReleaseState, UpdateSignature

__all__ = ["extract_attribute", "parse_signature"]


def extract_attribute(output: str, name: str) -> str | None:
    """Value of the first `name="value"` attribute in `output`, if any."""
    pattern = re.compile(rf'(?<![\w:.-]){re.escape(name)}="([^"]*)"')
    match = pattern.search(output)
    if match is None:
        return None
    return match.group(1)


def parse_signature(
    output: str,
    *,
    attribute: str = "sparkle:edSignature",
) -> Result[UpdateSignature, ReleaseError]:
    value = extract_attribute(output, attribute)
    if not value:
        return Err(
            ReleaseError(
                stage=ReleaseState.SIGNING,
                kind="signature_not_found",
                message=f"signature not found: no {attribute}=\"...\" in signing tool output",
                output=output,
                hint="check that the EdDSA private key is available in the keychain",
            )
        )

    length_text = extract_attribute(output, "length")
    length = int(length_text) if length_text and length_text.isdigit() else None
    return Ok(UpdateSignature(value=value, length=length))
