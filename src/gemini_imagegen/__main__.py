from gemini_imagegen.api.main import main

main()
