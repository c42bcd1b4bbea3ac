from swanclient.cli.commands import app

app()
