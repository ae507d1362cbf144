from helpview.main import main

main()
