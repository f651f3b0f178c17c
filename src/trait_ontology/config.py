"""Run configuration for the trait-ontology commands."""
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from trait_ontology.model.records import Root

C = TypeVar("C", bound=BaseModel)


class BuildConfiguration(BaseModel):
    """Options for building a dictionary and/or OBO file from a trait workbook."""

    model_config = ConfigDict(protected_namespaces=())

    workbook: Path
    """Trait workbook to read"""

    obo_output: Optional[Path] = None
    """Where to write the generic OBO file"""

    dictionary_output: Optional[Path] = None
    """Where to write the trait dictionary"""

    username: Optional[str] = None
    """Person generating the files; required for OBO output"""

    institution: Optional[str] = None
    """Only keep variables used by this institution"""

    force: bool = False
    """Skip the required and unique column checks"""

    @model_validator(mode="after")
    def _check_outputs(self):
        if not self.obo_output and not self.dictionary_output:
            raise ValueError("At least one output (-o or -t) must be specified.")
        if self.obo_output and not self.username:
            raise ValueError("Username (-u) must be specified when creating obo file.")
        return self


class WorkbookConfiguration(BaseModel):
    """Options for creating a trait workbook from a trait dictionary."""

    model_config = ConfigDict(protected_namespaces=())

    input: str
    """Path to a trait dictionary, or a Crop Ontology root id to download"""

    output: Path
    root_id: str
    root_name: str
    namespace: str

    def root(self) -> Root:
        return Root(root_id=self.root_id, name=self.root_name, namespace=self.namespace)


class ConvertConfiguration(BaseModel):
    """Options for merging the namespaces of an OBO file."""

    model_config = ConfigDict(protected_namespaces=())

    input: Path
    output: Path
    default_namespace: str
    namespaces: List[str] = Field(..., min_length=1)


def load_configuration(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration values from a YAML file.

    :param path:
    :return:
    """
    with open(path) as file:
        values = yaml.safe_load(file) or {}
    if not isinstance(values, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")
    return values


def configure(cls: Type[C], config_path: Union[str, Path] = None, **options) -> C:
    """
    Build a configuration, with explicit options overriding file values.

    Options that are None (not given on the command line) do not override.

    :param cls: configuration model
    :param config_path: optional YAML file
    :param options:
    :return:
    """
    values = load_configuration(config_path) if config_path else {}
    values.update({k: v for k, v in options.items() if v is not None})
    return cls(**values)
