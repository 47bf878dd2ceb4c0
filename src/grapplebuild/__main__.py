from grapplebuild.cli.main import main

main()
