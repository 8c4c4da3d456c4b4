from dotlayer.cli import main

main()
