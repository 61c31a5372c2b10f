"""Exception hierarchy raised by the parser, validator, generator and CLI setup."""

from __future__ import annotations


class AppError(Exception):
    """Base class for every error the application reports."""

    _template = "Other error:{}"

    def __init__(self, message: str, kind: str = "other") -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind

    def __str__(self) -> str:
        return self._template.format(self.message)


class SchemaError(AppError):
    """The schema configuration or the parsed structure breaks a rule."""

    _template = "Schema error: {} "

    @classmethod
    def no_match(cls, text: str, pattern: str) -> SchemaError:
        return cls(f"Input '{text}' doesn't match pattern '{pattern}'", "no_match")

    @classmethod
    def not_contained(cls, column_type: str) -> SchemaError:
        return cls(
            f"Input column type {column_type} doesn't be contained.", "no_contained"
        )

    @classmethod
    def bad_format(cls) -> SchemaError:
        return cls("Fail to get configuration from content.", "file_format")

    @classmethod
    def regex_error(cls, pattern: str) -> SchemaError:
        return cls(f"Could not match pattern from : {pattern}", "regex_match")

    @classmethod
    def field_invalid(cls, field: str, field_type: str) -> SchemaError:
        return cls(
            f"Validation Error:Value: {field},Type:{field_type}", "validate_field"
        )

    @classmethod
    def relation_column_mismatch(cls, source: str, target: str) -> SchemaError:
        return cls(
            f"Relation column doesn't equal.from:{source},to:{target}",
            "relation_column_not_eq",
        )

    @classmethod
    def relation_schema_mismatch(cls, source: str, target: str) -> SchemaError:
        return cls(
            f"Relation schema doesn't equal.from:{source},to:{target}",
            "relation_schema_not_eq",
        )


class ParserError(AppError):
    """The input could not be read or parsed, or holds duplicate names."""

    _template = "Parse error: {}"

    @classmethod
    def parser_not_found(cls) -> ParserError:
        return cls("Nothing was parsed from the file.", "parser_not_found")

    @classmethod
    def open_failed(cls) -> ParserError:
        return cls("Could not open file.", "open_file_failed")

    @classmethod
    def read_failed(cls) -> ParserError:
        return cls("Could not read file.", "read_file_failed")

    @classmethod
    def parse_table_failed(cls) -> ParserError:
        return cls("Fail to parse the table from the file.", "parse_table_fail")

    @classmethod
    def parse_enum_failed(cls) -> ParserError:
        return cls("Fail to parse the enum from the file.", "parse_enum_fail")

    @classmethod
    def name_duplicated(cls, names: str) -> ParserError:
        return cls(f"Duplicate element name found in file:{names}", "name_duplicated")

    @classmethod
    def item_name_duplicated(cls, container: str, item: str) -> ParserError:
        return cls(
            f"Duplicate element found in {container}:{item}.", "item_name_duplicated"
        )


class GenerationError(AppError):
    """A migration file could not be rendered or written."""

    _template = "Generate error: {}"

    @classmethod
    def folder_not_created(cls, path: str) -> GenerationError:
        return cls(f"Could not create the folder {path}.", "could_not_create_folder")

    @classmethod
    def file_not_created(cls, path: str) -> GenerationError:
        return cls(f"Could not create the file {path}.", "could_not_create_file")

    @classmethod
    def render_failed(cls) -> GenerationError:
        return cls("Could not render the context.", "could_not_render_context")

    @classmethod
    def template_not_loaded(cls, path: str) -> GenerationError:
        return cls(
            f"Could not load the file template {path}.", "could_not_load_template"
        )


class InitError(AppError):
    """The command line or the working directory setup is unusable."""

    _template = "Init client error:{}"

    @classmethod
    def input_not_found(cls) -> InitError:
        return cls("The input file is not found.", "input_file_not_found")

    @classmethod
    def input_not_file(cls) -> InitError:
        return cls("The input must be a flie.", "input_must_be_file")

    @classmethod
    def config_not_created(cls) -> InitError:
        return cls("The configuration could not be created.", "config_not_created")

    @classmethod
    def output_not_created(cls) -> InitError:
        return cls("The output folder could not be created.", "output_not_created")

    @classmethod
    def output_not_folder(cls) -> InitError:
        return cls("The output must be a floder.", "output_must_be_folder")

    @classmethod
    def template_folder_not_created(cls) -> InitError:
        return cls(
            "The configuration folder could not be created.",
            "template_folder_not_created",
        )

    @classmethod
    def template_unavailable(cls) -> InitError:
        return cls("The output folder is unavailable.", "template_file_unavailable")