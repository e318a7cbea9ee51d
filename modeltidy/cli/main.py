"""
Command-line interface for modeltidy.

Commands:
- tidy / glance / augment: tables for a joblib-persisted fitted model
- validate: check a CSV table against the contract for its role
- schemas: list the registered per-model-type schemas
"""

import json
import pickle
import sys
from pathlib import Path
from typing import Optional

import click
import joblib
import pandas as pd
import yaml

from modeltidy import __version__
from modeltidy.contracts import ModelOptions, SchemaRegistry, TableRole, TidyContractValidator
from modeltidy.tidiers import augment, glance, tidy
from modeltidy.utils.config import TidySettings, load_settings
from modeltidy.utils.errors import TidyError
from modeltidy.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


class CliContext:
    """Settings and schemas loaded once per invocation."""

    def __init__(self, settings: TidySettings):
        self.settings = settings
        self.schemas = SchemaRegistry.from_settings(settings)


def _load_model(path: str):
    try:
        return joblib.load(path)
    except (OSError, EOFError, ValueError, pickle.UnpicklingError) as e:
        raise click.ClickException(f"Could not load model from {path}: {e}") from e


def _read_table(path: Optional[str], index_col: Optional[str] = None) -> Optional[pd.DataFrame]:
    if path is None:
        return None
    return pd.read_csv(path, index_col=index_col)


def _emit(table: pd.DataFrame, output: Optional[str]):
    if output:
        Path(output).parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(output, index=False)
        click.echo(f"✓ Wrote {len(table)} rows to {output}", err=True)
    else:
        click.echo(table.to_csv(index=False), nl=False)


def _fail(operation: str, error: Exception):
    logger.log_operation_failed(operation, error)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='YAML configuration file')
@click.pass_context
def cli(ctx, config_path):
    """Tidy, glance and augment tables for fitted statistical models."""
    try:
        settings = load_settings(config_path)
        configure_logging(settings.log_level, settings.log_file)
        ctx.obj = CliContext(settings)
    except TidyError as e:
        _fail('load_config', e)


@cli.command('tidy')
@click.argument('model_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--conf-int', is_flag=True, help='Add conf.low / conf.high')
@click.option('--conf-level', type=float, default=None, help='Interval coverage')
@click.option('--quick', is_flag=True, help='Only term and estimate')
@click.option('--exponentiate', is_flag=True, help='Exponentiate estimates and bounds')
@click.option('--output', default=None, help='CSV output path (default: stdout)')
@click.pass_obj
def tidy_command(obj, model_path, conf_int, conf_level, quick, exponentiate, output):
    """One row per model component.

    Example:
        modeltidy tidy model.joblib --conf-int
    """
    model = _load_model(model_path)
    try:
        table = tidy(model, conf_int=conf_int,
                     conf_level=conf_level or obj.settings.conf_level,
                     quick=quick, exponentiate=exponentiate,
                     schemas=obj.schemas, validate=obj.settings.validate_output)
    except TidyError as e:
        _fail('tidy', e)
    _emit(table, output)


@cli.command('glance')
@click.argument('model_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', default=None, help='CSV output path (default: stdout)')
@click.pass_obj
def glance_command(obj, model_path, output):
    """One row of model-level statistics."""
    model = _load_model(model_path)
    try:
        table = glance(model, schemas=obj.schemas, validate=obj.settings.validate_output)
    except TidyError as e:
        _fail('glance', e)
    _emit(table, output)


@cli.command('augment')
@click.argument('model_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--data', 'data_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='Original training data (CSV)')
@click.option('--newdata', 'newdata_path', type=click.Path(exists=True, dir_okay=False),
              default=None, help='Held-out data (CSV)')
@click.option('--index-col', default=None, help='CSV column holding row identifiers')
@click.option('--se-fit', is_flag=True, help='Add .se.fit')
@click.option('--interval', type=click.Choice(['none', 'confidence', 'prediction']),
              default='none', help='Add .lower / .upper')
@click.option('--response', default=None, help='Response column name')
@click.option('--output', default=None, help='CSV output path (default: stdout)')
@click.pass_obj
def augment_command(obj, model_path, data_path, newdata_path, index_col, se_fit,
                    interval, response, output):
    """One row per observation with derived .-prefixed columns.

    Example:
        modeltidy augment model.joblib --newdata holdout.csv
    """
    model = _load_model(model_path)
    try:
        table = augment(
            model,
            data=_read_table(data_path, index_col),
            newdata=_read_table(newdata_path, index_col),
            se_fit=se_fit,
            interval=interval,
            conf_level=obj.settings.conf_level,
            response=response,
            validate=obj.settings.validate_output
        )
    except TidyError as e:
        _fail('augment', e)
    _emit(table, output)


@cli.command('validate')
@click.argument('table_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--role', type=click.Choice([r.value for r in TableRole]), required=True,
              help='Role the table claims')
@click.option('--model-type', default=None, help='Check columns against this model type')
@click.option('--conf-int', is_flag=True, help='tidy: intervals were requested')
@click.option('--quick', is_flag=True, help='tidy: quick table')
@click.option('--input-rows', type=int, default=None, help='augment: input row count')
@click.option('--has-response', is_flag=True, help='augment: input carried the response')
@click.option('--has-rownames', is_flag=True, help='augment: input carried row identifiers')
@click.option('--input-columns', default='', help='augment: comma-separated input columns')
@click.pass_obj
def validate_command(obj, table_path, role, model_type, conf_int, quick, input_rows,
                     has_response, has_rownames, input_columns):
    """Check a CSV table against its role's contract.

    Prints the report as JSON and exits with status 1 on violations.
    """
    table = pd.read_csv(table_path)
    validator = TidyContractValidator()

    try:
        if role == TableRole.TIDY.value:
            options = ModelOptions(conf_int=conf_int, quick=quick)
            expected = obj.schemas.component_columns(model_type, options) if model_type else None
            report = validator.validate_component_table(table, options, expected_columns=expected)
        elif role == TableRole.GLANCE.value:
            expected = obj.schemas.summary_columns(model_type) if model_type else None
            report = validator.validate_summary_table(table, expected_columns=expected)
        else:
            if input_rows is None:
                raise click.UsageError("--input-rows is required for augment tables")
            report = validator.validate_observation_table(
                table,
                input_row_count=input_rows,
                has_response=has_response,
                input_columns=[c.strip() for c in input_columns.split(',') if c.strip()],
                has_rownames=has_rownames
            )
    except TidyError as e:
        _fail('validate', e)

    click.echo(json.dumps({
        'ok': report.ok,
        **report.summary(),
        'violations': [v.model_dump(mode='json') for v in report.violations]
    }, indent=2))
    if not report.ok:
        sys.exit(1)


@cli.command('schemas')
@click.pass_obj
def schemas_command(obj):
    """List registered model-type schemas as YAML."""
    listing = {}
    for model_type in obj.schemas.model_types():
        schema = obj.schemas.get(model_type)
        listing[model_type] = {
            'component_columns': schema.component_columns,
            'summary_columns': schema.summary_columns,
        }
    click.echo(yaml.safe_dump(listing, sort_keys=False), nl=False)


if __name__ == '__main__':
    cli()
