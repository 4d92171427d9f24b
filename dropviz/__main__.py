from dropviz.app import main

main()
