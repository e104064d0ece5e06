"""Command construction: argument-vector models and the pipeline builder.

Usage:
    from mysql_dumper.commands import Command, CommandBuilder, Pipeline
"""

from mysql_dumper.commands.builder import CommandBuilder
from mysql_dumper.commands.models import Command, Pipeline

__all__ = ["Command", "CommandBuilder", "Pipeline"]
