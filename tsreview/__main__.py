from tsreview.check import main

main()
