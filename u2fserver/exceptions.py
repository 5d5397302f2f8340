# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

from __future__ import annotations

import logging

from functools import wraps
from typing import Callable, Optional, Type


logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Stored or transported bytes could not be decoded."""


class FormatError(DecodeError):
    """A serialized device record is malformed or incomplete."""


def catch_builtins(
    f: Optional[Callable] = None, *, error: Type[DecodeError] = DecodeError
):
    """Utility decorator to wrap common exceptions raised while decoding.

    Usable bare (``@catch_builtins``) or with a more specific error type
    (``@catch_builtins(error=FormatError)``).
    """

    def decorator(func):
        @wraps(func)
        def inner(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except DecodeError as e:
                logger.debug("%s failed: %s", func.__qualname__, e)
                raise
            except (ValueError, KeyError, IndexError, TypeError, RecursionError) as e:
                logger.debug("%s failed: %s", func.__qualname__, e)
                raise error(str(e) or type(e).__name__) from e

        return inner

    if f is not None:
        return decorator(f)
    return decorator
