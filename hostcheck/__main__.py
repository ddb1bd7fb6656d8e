from hostcheck.cli import main

main()
