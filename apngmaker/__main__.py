from apngmaker.cli.main import cli_entry

cli_entry()
