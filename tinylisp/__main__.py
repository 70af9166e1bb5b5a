from tinylisp.main import main

main()
