from proxy_printer.cli.main import cli

if __name__ == "__main__":
    cli()
