"""
LinkTree Sources: Metadata Sources.

A metadata source maps an absolute file path to a mapping of metadata field
names to values. The builder only needs the single capability
``metadata_for(path)``; any plain callable with the same signature is adapted
through CallableMetadataSource.

Shipped implementations:
    YamlSidecarMetadata: reads ``<file><suffix>`` next to each file
    YamlIndexMetadata: reads one YAML file keyed by file base name
"""

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Union

import yaml

from linktree.core.constants import DEFAULT_SIDECAR_SUFFIX, ErrorCode, Metadata
from linktree.core.errors import ConfigurationError, MetadataRetrievalError

MetadataGetter = Callable[[str], Metadata]


class MetadataSource(ABC):
    """Capability that produces metadata for one file."""

    @abstractmethod
    def metadata_for(self, path: str) -> Metadata:
        """
        Return the metadata mapping for a file.

        Args:
            path: Absolute path of the file

        Returns:
            Mapping of field name to value; values may be None or empty
        """

    def __call__(self, path: str) -> Metadata:
        return self.metadata_for(path)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class CallableMetadataSource(MetadataSource):
    """Adapts a plain function to the MetadataSource capability."""

    def __init__(self, getter: MetadataGetter):
        self.getter = getter

    def metadata_for(self, path: str) -> Metadata:
        return self.getter(path)

    def __repr__(self) -> str:
        name = getattr(self.getter, "__name__", repr(self.getter))
        return f"{self.__class__.__name__}({name})"


def as_metadata_source(getter: Union[MetadataSource, MetadataGetter]) -> MetadataSource:
    """Wrap a callable in CallableMetadataSource unless it already is a source."""
    if isinstance(getter, MetadataSource):
        return getter
    return CallableMetadataSource(getter)


def _load_yaml_mapping(path: str) -> Dict[str, Any]:
    """Read a YAML document that must be a mapping (an empty file is {})."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise MetadataRetrievalError(f"YAML parse error in {path}: {e}", path=path)
    except OSError as e:
        raise MetadataRetrievalError(
            f"Cannot read metadata file {path}: {e.strerror or e}",
            path=path,
            error_code=ErrorCode.NOT_FOUND,
        )

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise MetadataRetrievalError(
            f"Metadata file {path} must contain a YAML mapping, got {type(data).__name__}",
            path=path,
        )

    return data


def _stringify(metadata: Mapping[Any, Any]) -> Dict[str, Optional[str]]:
    # YAML turns values like 2007 or true into non-strings
    return {
        str(key): None if value is None else str(value) for key, value in metadata.items()
    }


class YamlSidecarMetadata(MetadataSource):
    """Reads metadata from a YAML file stored beside each file.

    For ``trove/files/christmas.txt`` and the default suffix, metadata is read
    from ``trove/files/christmas.txt.yaml``.
    """

    def __init__(self, suffix: str = DEFAULT_SIDECAR_SUFFIX, required: bool = False):
        """
        Args:
            suffix: Appended to the file path to locate its sidecar
            required: If True a missing sidecar raises MetadataRetrievalError,
                      otherwise the file gets empty metadata
        """
        if not suffix:
            raise ConfigurationError("Sidecar suffix cannot be empty")
        self.suffix = suffix
        self.required = required

    def sidecar_path(self, path: str) -> str:
        return path + self.suffix

    def is_sidecar(self, path: str) -> bool:
        """True for paths that are the sidecar of an existing file.

        ``notes.yaml`` with no ``notes`` beside it is an ordinary file, not a
        sidecar.
        """
        path = os.fspath(path)
        if not path.endswith(self.suffix):
            return False
        return os.path.isfile(path[: -len(self.suffix)])

    def metadata_for(self, path: str) -> Metadata:
        sidecar = self.sidecar_path(path)

        if not os.path.exists(sidecar):
            if self.required:
                raise MetadataRetrievalError(
                    f"No metadata sidecar for {path}",
                    path=path,
                    error_code=ErrorCode.NOT_FOUND,
                )
            return {}

        return _stringify(_load_yaml_mapping(sidecar))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(suffix={self.suffix!r}, required={self.required})"


class YamlIndexMetadata(MetadataSource):
    """Reads metadata for every file from one YAML index.

    The index maps file base names to metadata mappings:

        christmas.txt:
          religion: Christian
          date: Dec25

    The index is read once, on first use. Files missing from the index get
    empty metadata.
    """

    def __init__(self, index_file: str):
        self.index_file = index_file
        self._index: Optional[Dict[str, Any]] = None

    def _load(self) -> Dict[str, Any]:
        if self._index is None:
            index = _load_yaml_mapping(self.index_file)
            for name, entry in index.items():
                if entry is not None and not isinstance(entry, dict):
                    raise MetadataRetrievalError(
                        f"Index entry {name!r} in {self.index_file} must be a mapping",
                        path=self.index_file,
                    )
            self._index = index
        return self._index

    def metadata_for(self, path: str) -> Metadata:
        entry = self._load().get(os.path.basename(path))
        if not entry:
            return {}
        return _stringify(entry)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.index_file!r})"
