from cfncli.cli.app import main

main()
