from shotserver.server import main

main()
