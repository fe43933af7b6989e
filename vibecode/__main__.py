from vibecode.cli import main

main()
