from mrc.cli.app import main

main()
