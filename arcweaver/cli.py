#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for ArcWeaver.

This module provides the main CLI entry point and all subcommands for
converting bcalm2 unitig graphs into arc-centric de Bruijn graphs.
"""

import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.parser import ConfigParser, ConfigValidationError
from .config.schema import load_config, save_config_template, validate_config
from .errors import ArcWeaverError, InputOutputError

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name='arcweaver')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    ArcWeaver: node-centric to arc-centric de Bruijn graph converter

    Reads a compacted de Bruijn graph in bcalm2 format and writes the
    equivalent arc-centric bidirected graph with integer arc weights.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='arcweaver_config.yaml',
              help='Output configuration file path')
@click.option('--kmer-size', '-k', type=int, default=None,
              help='k-mer size to pre-fill in the template')
def config_init(output, kmer_size):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating configuration template: {output}")

    try:
        save_config_template(Path(output), kmer_size=kmer_size)
    except OSError as e:
        click.echo(f"✗ Error creating configuration: {e}", err=True)
        sys.exit(InputOutputError.exit_code)

    click.echo(f"✓ Configuration file created: {output}")
    click.echo("\nEdit this file to customize the conversion.")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error validating configuration: {e}", err=True)
        sys.exit(1)

    # k may still come from the command line
    errors = validate_config(config, require_kmer_size=False)

    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")

    # Show key settings
    k = config['conversion']['kmer_size']
    click.echo("\nKey Settings:")
    click.echo(f"  k-mer size: {k if k is not None else 'not set (pass -k)'}")
    click.echo(f"  Output format: {config['conversion']['output_format']}")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except (OSError, yaml.YAMLError) as e:
        click.echo(f"✗ Error reading configuration: {e}", err=True)
        sys.exit(1)

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    conversion = config['conversion']
    output = config['output']
    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nConversion:")
    click.echo(f"  k-mer size: {conversion['kmer_size']}")
    click.echo(f"  Output format: {conversion['output_format']}")
    click.echo(f"  Warning prefix padding: {conversion['warning_prefix_padding']}")

    click.echo("\nOutput:")
    click.echo(f"  Atomic write: {output['atomic_write']}")
    click.echo(f"  Log level: {output['logging']['level']}")
    if output['logging']['log_file']:
        click.echo(f"  Log file: {output['logging']['log_file']}")

    click.echo("\nInstrumentation:")
    click.echo(f"  Memory report: {config['instrumentation']['memory_report']}")


# ============================================================================
# Conversion Command
# ============================================================================

@main.command()
@click.option('--input', '-i', 'input_path', required=True, type=click.Path(dir_okay=False),
              help='Input bcalm2 unitig file (.fa or .fa.gz)')
@click.option('--kmer-size', '-k', 'kmer_size', type=int, default=None,
              help='k-mer size the bcalm2 graph was built with (required unless set in config)')
@click.option('--output', '-o', 'output_path', required=True, type=click.Path(dir_okay=False),
              help='Output arc-centric graph file (.gz for compressed output)')
@click.option('--format', '-f', 'output_format',
              type=click.Choice(['canonical', 'legacy'], case_sensitive=False), default=None,
              help='Output layout: canonical (with mirror columns) or legacy')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--log-level', type=str, default=None,
              help='Log level: Debug, Info, Warning, Error (default: Info)')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None,
              help='Also write log messages to this file')
@click.option('--memory-report/--no-memory-report', default=None,
              help='Log memory usage before and after loading and writing')
@click.option('--stats', 'stats_file', type=click.Path(dir_okay=False), default=None,
              help='Write conversion statistics to this YAML file')
@click.pass_context
def convert(ctx, input_path, kmer_size, output_path, output_format, config_file,
            log_level, log_file, memory_report, stats_file):
    """
    Convert a bcalm2 unitig graph into an arc-centric de Bruijn graph.

    Example:
        arcweaver convert -i unitigs.fa -k 31 -o graph.arcs
    """
    from .utils.pipeline import ConversionPipeline, setup_logging

    verbose = ctx.obj.get('VERBOSE', False)
    quiet = ctx.obj.get('QUIET', False)

    # Explicit --log-level wins over --verbose/--quiet
    if log_level is None:
        if verbose:
            log_level = 'DEBUG'
        elif quiet:
            log_level = 'ERROR'

    try:
        parser = ConfigParser(config_file)
        parser.merge_cli_overrides({
            'conversion.kmer_size': kmer_size,
            'conversion.output_format': output_format.lower() if output_format else None,
            'output.logging.level': log_level,
            'output.logging.log_file': log_file,
            'instrumentation.memory_report': memory_report,
        })
        parser.validate()
    except ConfigValidationError as e:
        raise click.UsageError(str(e), ctx=ctx)

    setup_logging(parser.get('output.logging.level'), parser.get('output.logging.log_file'))

    try:
        pipeline = ConversionPipeline(parser.to_dict())
    except ValueError as e:
        raise click.UsageError(str(e), ctx=ctx)

    try:
        stats = pipeline.run(input_path, output_path)
        if stats_file:
            try:
                with open(stats_file, 'w') as f:
                    yaml.dump(stats.to_dict(), f, default_flow_style=False, sort_keys=False)
            except OSError as e:
                raise InputOutputError(f"Cannot write statistics file {stats_file}: {e}") from e
    except ArcWeaverError as e:
        logger.debug("Conversion failed", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        ctx.exit(e.exit_code)

    logger.info(stats.summary())
    if not quiet:
        click.echo(f"✓ Wrote {stats.arc_lines} arcs on {stats.nodes} nodes to {output_path}")


if __name__ == '__main__':
    sys.exit(main())
