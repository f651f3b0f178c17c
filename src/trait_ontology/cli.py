"""Command line interface for trait-ontology."""
import logging
from typing import Type

import click
import pydantic

from trait_ontology import __version__
from trait_ontology.builder import (
    convert_obo,
    create_workbook,
    load_workbook_records,
    run_build,
)
from trait_ontology.config import (
    BuildConfiguration,
    ConvertConfiguration,
    WorkbookConfiguration,
    configure,
)
from trait_ontology.errors import TraitOntologyError
from trait_ontology.validation import validate_records
from trait_ontology.wrappers import get_wrapper

__all__ = [
    "main",
]

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="YAML file with option values; command line options take precedence.",
)
institution_option = click.option(
    "-i",
    "--institution",
    help="Only include the variables used by this institution.",
)


def _configure(cls: Type[pydantic.BaseModel], config_path: str = None, **options):
    try:
        return configure(cls, config_path, **options)
    except pydantic.ValidationError as e:
        messages = []
        for err in e.errors():
            msg = err["msg"]
            if msg.startswith("Value error, "):
                messages.append(msg[len("Value error, ") :])
            else:
                messages.append(f"{'.'.join(str(p) for p in err['loc'])}: {msg}")
        raise click.UsageError("\n".join(messages)) from e


@click.group()
@click.option("-v", "--verbose", count=True)
@click.option("-q", "--quiet", is_flag=True)
@click.version_option(__version__)
def main(verbose: int, quiet: bool):
    """CLI for trait-ontology.

    :param verbose: Verbosity while running.
    :param quiet: Boolean to be quiet or verbose.
    """
    logging.basicConfig()
    logger = logging.root
    if verbose >= 2:
        logger.setLevel(level=logging.DEBUG)
    elif verbose == 1:
        logger.setLevel(level=logging.INFO)
    else:
        logger.setLevel(level=logging.WARNING)
    if quiet:
        logger.setLevel(level=logging.ERROR)
    logger.info(f"Logger {logger.name} set to level {logger.level}")


@main.command(name="create-workbook")
@click.option("-d", "--namespace", help="Default ontology namespace, e.g. sugar_kelp_trait.")
@click.option("-n", "--name", "root_name", help="Ontology display name, e.g. 'Sugar Kelp Traits'.")
@click.option("-r", "--root", "root_id", help="Ontology root id, e.g. CO_360.")
@click.option(
    "-o", "--output", type=click.Path(dir_okay=False), help="Trait workbook to write (xlsx)."
)
@click.option(
    "--cache/--no-cache",
    default=False,
    show_default=True,
    help="Cache trait dictionary downloads.",
)
@config_option
@click.argument("input", required=False)
def create_workbook_command(input, namespace, root_name, root_id, output, cache, config_path):
    """
    Create a trait workbook from a trait dictionary.

    INPUT is the path to a trait dictionary file, or a Crop Ontology root id
    whose dictionary is downloaded from cropontology.org.

    Example:

        trait-ontology create-workbook -r CO_360 -n "Sugar Kelp Traits" -d sugar_kelp -o tw.xlsx CO_360

    """
    config = _configure(
        WorkbookConfiguration,
        config_path,
        input=input,
        namespace=namespace,
        root_name=root_name,
        root_id=root_id,
        output=output,
    )
    records = create_workbook(config, use_cache=cache)
    click.echo(
        f"Wrote {len(records.variables)} variables, {len(records.traits)} traits, "
        f"{len(records.methods)} methods and {len(records.scales)} scales to {config.output}"
    )


@main.command()
@click.option("-o", "--obo-output", type=click.Path(dir_okay=False), help="OBO file to write.")
@click.option("-u", "--username", help="Person generating the files; required with -o.")
@click.option(
    "-t", "--dictionary-output", type=click.Path(dir_okay=False), help="Trait dictionary to write."
)
@institution_option
@click.option(
    "-f", "--force", is_flag=True, help="Skip the required and unique column checks."
)
@config_option
@click.argument("workbook", type=click.Path(exists=True, dir_okay=False), required=False)
def build(workbook, obo_output, username, dictionary_output, institution, force, config_path):
    """
    Build a trait dictionary and/or OBO file from a trait workbook.

    Example:

        trait-ontology build -o traits.obo -u djw64 -t traits.csv tw.xlsx

    """
    config = _configure(
        BuildConfiguration,
        config_path,
        workbook=workbook,
        obo_output=obo_output,
        username=username,
        dictionary_output=dictionary_output,
        institution=institution,
        force=force or None,
    )
    try:
        result = run_build(config)
    except TraitOntologyError as e:
        raise click.ClickException(str(e)) from e
    for mismatch in result.mismatches:
        click.echo(f"==> ERROR: {mismatch}", err=True)
    if config.dictionary_output:
        click.echo(f"Wrote trait dictionary to {config.dictionary_output}")
    if config.obo_output:
        click.echo(f"Wrote OBO file to {config.obo_output}")


@main.command(name="convert-obo")
@click.option("-d", "--default", "default_namespace", help="Namespace to merge into.")
@click.option(
    "-n",
    "--namespace",
    "namespaces",
    multiple=True,
    help="Namespace to rename to the default namespace; may be repeated.",
)
@click.option("-o", "--output", type=click.Path(dir_okay=False), help="OBO file to write.")
@config_option
@click.argument("input", type=click.Path(exists=True, dir_okay=False), required=False)
def convert_obo_command(input, default_namespace, namespaces, output, config_path):
    """
    Merge the namespaces of a standard OBO file into one default namespace.

    Example:

        trait-ontology convert-obo -d sugar_kelp -n sugar_kelp -n sugar_kelp_trait -o sgn.obo std.obo

    """
    config = _configure(
        ConvertConfiguration,
        config_path,
        input=input,
        default_namespace=default_namespace,
        namespaces=list(namespaces) or None,
        output=output,
    )
    convert_obo(config)
    counts = get_wrapper("oboformat", source_locator=config.output).namespace_counts()
    for namespace, count in counts.most_common():
        click.echo(f"{namespace}: {count}")


@main.command()
@institution_option
@click.argument("workbook", type=click.Path(exists=True, dir_okay=False))
def validate(workbook, institution):
    """
    Check a trait workbook without writing anything.

    Reports missing required values, duplicated unique values and
    variables whose trait, method or scale does not match.
    """
    try:
        records = load_workbook_records(workbook, institution=institution)
        validate_records(records)
    except TraitOntologyError as e:
        raise click.ClickException(str(e)) from e
    mismatches = records.resolve().mismatches
    for mismatch in mismatches:
        click.echo(f"==> ERROR: {mismatch}", err=True)
    if mismatches:
        raise click.ClickException(f"{len(mismatches)} unmatched variable references")
    click.echo(f"{workbook}: OK ({len(records.variables)} variables)")


if __name__ == "__main__":
    main()
