from postman_mcp.cli.main import app

app()
