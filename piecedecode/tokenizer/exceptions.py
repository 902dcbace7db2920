# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Errors raised by tokenization model backends."""


class ModelError(Exception):
    """Base for everything that can go wrong talking to a tokenization model."""


class ModelLoadError(ModelError):
    """The model file is missing or the backend refused to load it."""


class ExtraOptionsError(ModelError):
    """The model rejected the ':' separated decode extra options string."""


class DecodeError(ModelError):
    """
    A single decode call failed: an unknown piece, an id outside the
    vocabulary, or any other failure reported by the backend library.
    """
