from ifdef.cli import main

main()
